from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.models import Client, User


@pytest.fixture
def migration_settings(settings, tmp_path, export_file):
    settings.V1_MIGRATION = {
        "DATA_PATH": str(export_file),
        "BACKUP_DIR": str(tmp_path / "backups"),
        "REPORT_DIR": str(tmp_path / "reports"),
    }
    return settings.V1_MIGRATION


def run_command(*args, **options):
    out, err = StringIO(), StringIO()
    call_command("migrate_v1_to_v2", *args, stdout=out, stderr=err, **options)
    return out.getvalue()


@pytest.mark.django_db
def test_live_migration_exits_cleanly(migration_settings, tmp_path):
    output = run_command()

    assert "LIVE MIGRATION" in output
    assert "V1 → V2 migration completed successfully!" in output
    assert "Migration script completed" in output
    assert User.objects.count() == 2
    assert Client.objects.count() == 2
    assert len(list((tmp_path / "reports").glob("migration-report-*.txt"))) == 1


@pytest.mark.django_db
def test_dry_run_flag(migration_settings):
    output = run_command(dry_run=True)

    assert "DRY RUN (no changes will be made)" in output
    assert "[DRY RUN] Migrated staff: Anna Berg (anna@example.se)" in output
    assert User.objects.count() == 0


@pytest.mark.django_db
def test_positional_data_path_overrides_settings(migration_settings, write_export):
    path = write_export({"staff": [{"id": "s5", "name": "Sara", "email": "sara@example.se"}], "clients": []},
                        name="other.json")

    output = run_command(str(path))

    assert f"Data file: {path}" in output
    assert list(User.objects.values_list("email", flat=True)) == ["sara@example.se"]


def test_missing_export_exits_with_code_1(migration_settings, tmp_path):
    with pytest.raises(CommandError) as exc:
        run_command(str(tmp_path / "missing.json"))

    assert exc.value.returncode == 1


@pytest.mark.django_db
def test_rollback_exits_with_code_1(migration_settings, export_data, write_export):
    export_data["weeklyDocs"][0]["status"] = "unknown"

    with pytest.raises(CommandError) as exc:
        run_command(str(write_export(export_data, name="bad.json")))

    assert exc.value.returncode == 1
    assert User.objects.count() == 0
