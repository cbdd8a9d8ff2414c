import json
import os
from datetime import datetime, timezone as dt_timezone

import django
import pytest

# Ensure Django is configured when running under plain pytest
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ungdomsstod.settings")
django.setup()

from core.migration_log import MigrationLog


FIXED_NOW = datetime(2024, 3, 5, 14, 30, 15, 123456, tzinfo=dt_timezone.utc)


def sample_export():
    """Two staff, three clients; the third client points at a staff member that does not exist"""
    return {
        "version": "1.4.2",
        "staff": [
            {"id": "s1", "name": "Anna Berg", "email": "anna@example.se", "role": "admin"},
            {"id": "s2", "name": "Erik Lund", "email": "erik@example.se", "role": "staff"},
        ],
        "clients": [
            {"id": "c1", "initials": "AB", "name": "Alva Björk", "staffId": "s1"},
            {"id": "c2", "initials": "OL", "name": "Olle Lind", "staffId": "s2"},
            {"id": "c3", "initials": "XX", "name": "Orphan Client", "staffId": "s9"},
        ],
        "carePlans": [
            {"id": "cp1", "clientId": "c1", "carePlanDate": "2024-01-15", "hasGfp": True,
             "staffNotified": False, "notes": "Första planen"},
            {"id": "cp2", "clientId": "c3", "carePlanDate": "2024-01-20", "hasGfp": False},
        ],
        "weeklyDocs": [
            {"id": "w1", "clientId": "c1", "weekId": "2024-W03", "monday": True, "friday": True,
             "status": "approved"},
            {"id": "w2", "clientId": "c2", "weekId": "2024-W03"},
        ],
        "monthlyReports": [
            {"id": "m1", "clientId": "c2", "monthId": "2024-01", "sent": True, "status": "pending"},
        ],
        "vismaWeeks": [
            {"id": "v1", "clientId": "c1", "weekId": "2024-W03", "tuesday": True},
            {"id": "v2", "clientId": "missing", "weekId": "2024-W03"},
        ],
    }


@pytest.fixture
def export_data():
    return sample_export()


@pytest.fixture
def write_export(tmp_path):
    def _write(data, name="v1-export.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def export_file(write_export, export_data):
    return write_export(export_data)


@pytest.fixture
def migration_log():
    return MigrationLog()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
