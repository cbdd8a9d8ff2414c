import datetime

import pytest

from clients.models import CarePlan, MonthlyReport, VismaTime, WeeklyDoc
from core.entity_migrators import (
    CarePlanMigrator, MonthlyReportMigrator, VismaWeekMigrator, WeeklyDocMigrator, parse_legacy_date,
    run_migrators,
)
from core.identity_map import CLIENT, STAFF, IdentityMap, RemapTables
from core.legacy_validation import validate_export
from core.migration_errors import WriteFailure
from core.models import Client, User
from core.write_sinks import DatabaseSink, DryRunSink


@pytest.fixture
def dry_remap():
    return RemapTables(IdentityMap(STAFF, {"s1": "new-s1"}), IdentityMap(CLIENT, {"c1": "new-c1"}))


@pytest.fixture
def db_remap(db):
    user = User.objects.create(email="anna@example.se", name="Anna", password_hash="x", role="staff")
    client = Client.objects.create(initials="AB", name="Alva", staff=user)
    return RemapTables(IdentityMap(STAFF, {"s1": user.id}), IdentityMap(CLIENT, {"c1": client.id}))


@pytest.mark.parametrize("value, expected", [
    ("2024-01-15", datetime.date(2024, 1, 15)),
    ("2024-01-15T09:30:00Z", datetime.date(2024, 1, 15)),
    ("", None),
    (None, None),
    ("15/01/2024", "15/01/2024"),
])
def test_parse_legacy_date(value, expected):
    assert parse_legacy_date(value) == expected


class TestCarePlanMigrator:

    def test_unmigrated_client_is_skipped(self, dry_remap, migration_log):
        sink = DryRunSink()
        records = [
            {"id": "cp1", "clientId": "c1", "carePlanDate": "2024-01-15"},
            {"id": "cp2", "clientId": "c3", "carePlanDate": "2024-01-20"},
        ]

        outcome = CarePlanMigrator(sink, migration_log, dry_remap).migrate(records)

        assert (outcome.migrated, outcome.skipped) == (1, 1)
        assert outcome.identity_map is None
        assert sink.writes[0][2]["client_id"] == "new-c1"
        assert any("Skipping care plan cp2 (client c3) - client c3 was not migrated" in line
                   for line in migration_log.lines)

    def test_values_are_normalised(self, dry_remap, migration_log):
        sink = DryRunSink()
        CarePlanMigrator(sink, migration_log, dry_remap).migrate([
            {"id": "cp1", "clientId": "c1", "carePlanDate": "2024-01-15", "hasGFP": 1, "notes": ""},
        ])

        values = sink.writes[0][2]
        assert values["care_plan_date"] == datetime.date(2024, 1, 15)
        assert values["has_gfp"] is True
        assert values["staff_notified"] is False
        assert values["notes"] is None

    def test_writes_care_plan(self, db_remap, migration_log):
        CarePlanMigrator(DatabaseSink(), migration_log, db_remap).migrate([
            {"id": "cp1", "clientId": "c1", "carePlanDate": "2024-01-15", "hasGfp": True,
             "staffNotified": True, "notes": "Första planen"},
        ])

        plan = CarePlan.objects.get()
        assert plan.client_id == db_remap.resolve(CLIENT, "c1")
        assert plan.care_plan_date == datetime.date(2024, 1, 15)
        assert plan.has_gfp and plan.staff_notified
        assert plan.notes == "Första planen"

    def test_unparseable_date_fails_live_write(self, db_remap, migration_log):
        with pytest.raises(WriteFailure) as exc:
            CarePlanMigrator(DatabaseSink(), migration_log, db_remap).migrate([
                {"id": "cp1", "clientId": "c1", "carePlanDate": "15/01/2024"},
            ])
        assert exc.value.entity == "carePlans"


class TestWeeklyDocMigrator:

    def test_missing_status_defaults_to_pending(self, db_remap, migration_log):
        outcome = WeeklyDocMigrator(DatabaseSink(), migration_log, db_remap).migrate([
            {"id": "w1", "clientId": "c1", "weekId": "2024-W03", "monday": True, "sunday": True},
        ])

        doc = WeeklyDoc.objects.get()
        assert outcome.migrated == 1
        assert doc.status == "pending"
        assert doc.monday and doc.sunday
        assert not doc.wednesday

    def test_invalid_status_is_a_write_failure(self, db_remap, migration_log):
        with pytest.raises(WriteFailure):
            WeeklyDocMigrator(DatabaseSink(), migration_log, db_remap).migrate([
                {"id": "w1", "clientId": "c1", "weekId": "2024-W03", "status": "done"},
            ])

    def test_duplicate_week_is_a_write_failure(self, db_remap, migration_log):
        with pytest.raises(WriteFailure) as exc:
            WeeklyDocMigrator(DatabaseSink(), migration_log, db_remap).migrate([
                {"id": "w1", "clientId": "c1", "weekId": "2024-W03"},
                {"id": "w2", "clientId": "c1", "weekId": "2024-W03"},
            ])
        assert exc.value.legacy_id == "w2"


class TestMonthlyReportMigrator:

    def test_writes_monthly_report(self, db_remap, migration_log):
        MonthlyReportMigrator(DatabaseSink(), migration_log, db_remap).migrate([
            {"id": "m1", "clientId": "c1", "monthId": "2024-01", "sent": True, "status": "approved"},
        ])

        report = MonthlyReport.objects.get()
        assert report.month_id == "2024-01"
        assert report.sent is True
        assert report.status == "approved"


class TestVismaWeekMigrator:

    def test_only_weekdays_are_migrated(self, dry_remap, migration_log):
        sink = DryRunSink()
        VismaWeekMigrator(sink, migration_log, dry_remap).migrate([
            {"id": "v1", "clientId": "c1", "weekId": "2024-W03", "tuesday": True, "saturday": True},
        ])

        values = sink.writes[0][2]
        assert values["tuesday"] is True
        assert "saturday" not in values
        assert sink.count(VismaTime) == 1

    def test_missing_client_reference_is_skipped(self, dry_remap, migration_log):
        outcome = VismaWeekMigrator(DryRunSink(), migration_log, dry_remap).migrate([
            {"id": "v2", "weekId": "2024-W03"},
        ])
        assert (outcome.migrated, outcome.skipped) == (0, 1)


@pytest.mark.django_db
@pytest.mark.parametrize("legacy_client_id", [7, " c1 "])
def test_dependents_follow_normalised_client_ids(legacy_client_id, migration_log):
    export = validate_export({
        "staff": [{"id": "s1", "name": "Anna", "email": "anna@example.se", "role": "staff"}],
        "clients": [{"id": legacy_client_id, "initials": "AB", "name": "Alva", "staffId": "s1"}],
        "carePlans": [{"id": "cp1", "clientId": legacy_client_id, "carePlanDate": "2024-01-15"}],
        "weeklyDocs": [{"id": "w1", "clientId": legacy_client_id, "weekId": "2024-W03"}],
        "monthlyReports": [{"id": "m1", "clientId": legacy_client_id, "monthId": "2024-01"}],
        "vismaWeeks": [{"id": "v1", "clientId": legacy_client_id, "weekId": "2024-W03"}],
    })

    outcomes = run_migrators(export, DatabaseSink(), migration_log)

    client = Client.objects.get()
    assert client.care_plans.count() == 1
    assert client.weekly_docs.count() == 1
    assert client.monthly_reports.count() == 1
    assert client.visma_weeks.count() == 1
    assert all(outcome.skipped == 0 for outcome in outcomes.values())
