"""
Per-entity migrators for the V1 -> V2 migration.

Each migrator walks its source records once and returns a MigrationOutcome.
A single record step ends in one of three results:

- Migrated: the row was handed to the write sink.
- Skipped: the owning record was not migrated (unresolved foreign key).
  Expected, counted and logged, never an error.
- Failed: the sink rejected the row. The migrator raises WriteFailure so the
  surrounding transaction is rolled back.
"""
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils.dateparse import parse_date, parse_datetime

from clients.models import CarePlan, MonthlyReport, VismaTime, WeeklyDoc
from core.identity_map import CLIENT, STAFF, IdentityMap, IdentityMapBuilder, RemapTables
from core.migration_errors import WriteFailure
from core.models import Client, User, generate_id

# Placeholder credential; migrated users must reset their password before first login
MIGRATED_PASSWORD_HASH = '$2a$10$default.hash.for.migrated.users'

DEFAULT_STATUS = 'pending'


@dataclass(frozen=True)
class Migrated:
    legacy_id: object
    new_id: str


@dataclass(frozen=True)
class Skipped:
    legacy_id: object
    reason: str


@dataclass(frozen=True)
class Failed:
    legacy_id: object
    error: Exception


@dataclass(frozen=True)
class MigrationOutcome:
    entity: str
    label: str
    migrated: int
    skipped: int = 0
    identity_map: Optional[IdentityMap] = None


def parse_legacy_date(value):
    """Accept 'YYYY-MM-DD' or a full ISO timestamp; unparseable values pass through"""
    if not value:
        return None
    if not isinstance(value, str):
        return value
    try:
        parsed = parse_date(value)
        if parsed is None:
            moment = parse_datetime(value)
            parsed = moment.date() if moment else None
    except ValueError:
        parsed = None
    return parsed if parsed is not None else value


class EntityMigrator:
    entity = None
    label = None
    noun = None
    icon = '📦'
    model = None

    def __init__(self, sink, log):
        self.sink = sink
        self.log = log

    @property
    def prefix(self):
        return '[DRY RUN] ' if self.sink.dry_run else ''

    def describe(self, record):
        return str(record.get('id'))

    def step(self, record):
        raise NotImplementedError

    def write(self, legacy_id, new_id, values):
        try:
            problems = self.sink.write(self.model, new_id, values)
        except (DatabaseError, ValidationError) as e:
            return Failed(legacy_id, e)
        for problem in problems:
            self.log.warning(f'  ⚠️  {self.prefix}Live run would reject {self.noun} {legacy_id}: {problem}')
        return Migrated(legacy_id, new_id)

    def migrated_count(self, migrated):
        return migrated

    def identity_map(self):
        return None

    def migrate(self, records):
        self.log.info(f'{self.icon} {self.prefix}Migrating {len(records)} {self.label.lower()}...')
        migrated = skipped = 0

        for record in records:
            result = self.step(record)

            if isinstance(result, Failed):
                self.log.error(f'  ❌ Failed to migrate {self.noun} {self.describe(record)}: {result.error}')
                raise WriteFailure(self.entity, result.legacy_id, result.error) from result.error

            if isinstance(result, Skipped):
                skipped += 1
                self.log.warning(f'  ⚠️  {self.prefix}Skipping {self.noun} {self.describe(record)} - {result.reason}')
                continue

            migrated += 1
            self.log.info(f'  ✅ {self.prefix}Migrated {self.noun}: {self.describe(record)}')

        outcome = MigrationOutcome(
            entity=self.entity,
            label=self.label,
            migrated=self.migrated_count(migrated),
            skipped=skipped,
            identity_map=self.identity_map(),
        )
        self.log.success(
            f'✅ {self.prefix}{self.label} migration completed: {outcome.migrated} migrated, {skipped} skipped'
        )
        return outcome


class RootEntityMigrator(EntityMigrator):
    """Migrator for entities that receive new identifiers referenced by others"""

    kind = None

    def __init__(self, sink, log):
        super().__init__(sink, log)
        self.identities = IdentityMapBuilder(self.kind)

    def migrated_count(self, migrated):
        # A repeated legacy id overwrites its earlier mapping; reporting the map
        # size makes that surface as a count mismatch instead of passing silently.
        if migrated != len(self.identities):
            self.log.warning(
                f'  ⚠️  {migrated} {self.noun} rows written but {len(self.identities)} unique legacy ids mapped'
            )
        return len(self.identities)

    def identity_map(self):
        return self.identities.freeze()


class StaffMigrator(RootEntityMigrator):
    entity = 'staff'
    label = 'Staff'
    noun = 'staff'
    icon = '👥'
    kind = STAFF
    model = User

    def describe(self, record):
        return f"{record['name']} ({record['email']})"

    def step(self, record):
        new_id = self.identities.new_id()
        result = self.write(record['id'], new_id, {
            'email': record['email'],
            'name': record['name'],
            'password_hash': MIGRATED_PASSWORD_HASH,
            'role': record['role'],
            'is_active': True,
        })
        if isinstance(result, Migrated):
            self.identities.record(record['id'], new_id)
        return result


class ClientMigrator(RootEntityMigrator):
    entity = 'clients'
    label = 'Clients'
    noun = 'client'
    icon = '👤'
    kind = CLIENT
    model = Client

    def __init__(self, sink, log, remap):
        super().__init__(sink, log)
        self.remap = remap

    def describe(self, record):
        return f"{record['name']} ({record['initials']})"

    def step(self, record):
        new_id = self.identities.new_id()
        staff_id = self.remap.resolve(STAFF, record['staffId'])
        if staff_id is None:
            return Skipped(record['id'], f"staff {record['staffId']} not found")

        result = self.write(record['id'], new_id, {
            'initials': record['initials'],
            'name': record['name'],
            'staff_id': staff_id,
        })
        if isinstance(result, Migrated):
            self.identities.record(record['id'], new_id)
        return result


class DependentEntityMigrator(EntityMigrator):
    """Migrator for client-owned records"""

    def __init__(self, sink, log, remap):
        super().__init__(sink, log)
        self.remap = remap

    def describe(self, record):
        return f"{record.get('id')} (client {record.get('clientId')})"

    def build_values(self, record):
        raise NotImplementedError

    def step(self, record):
        legacy_id = record.get('id')
        client_id = self.remap.resolve(CLIENT, record.get('clientId'))
        if client_id is None:
            return Skipped(legacy_id, f"client {record.get('clientId')} was not migrated")

        values = self.build_values(record)
        values['client_id'] = client_id
        return self.write(legacy_id, generate_id(), values)


def day_flags(record, days):
    return {day: bool(record.get(day)) for day in days}


class CarePlanMigrator(DependentEntityMigrator):
    entity = 'carePlans'
    label = 'Care plans'
    noun = 'care plan'
    icon = '📋'
    model = CarePlan

    def build_values(self, record):
        has_gfp = record['hasGfp'] if 'hasGfp' in record else record.get('hasGFP')
        return {
            'care_plan_date': parse_legacy_date(record.get('carePlanDate')),
            'has_gfp': bool(has_gfp),
            'staff_notified': bool(record.get('staffNotified')),
            'notes': record.get('notes') or None,
        }


class WeeklyDocMigrator(DependentEntityMigrator):
    entity = 'weeklyDocs'
    label = 'Weekly docs'
    noun = 'weekly doc'
    icon = '📅'
    model = WeeklyDoc

    def describe(self, record):
        return f"{record.get('id')} (client {record.get('clientId')}, week {record.get('weekId')})"

    def build_values(self, record):
        return {
            'week_id': record.get('weekId'),
            'status': record.get('status') or DEFAULT_STATUS,
            **day_flags(record, WeeklyDoc.DAYS),
        }


class MonthlyReportMigrator(DependentEntityMigrator):
    entity = 'monthlyReports'
    label = 'Monthly reports'
    noun = 'monthly report'
    icon = '📊'
    model = MonthlyReport

    def describe(self, record):
        return f"{record.get('id')} (client {record.get('clientId')}, month {record.get('monthId')})"

    def build_values(self, record):
        return {
            'month_id': record.get('monthId'),
            'sent': bool(record.get('sent')),
            'status': record.get('status') or DEFAULT_STATUS,
        }


class VismaWeekMigrator(DependentEntityMigrator):
    entity = 'vismaWeeks'
    label = 'Visma weeks'
    noun = 'Visma week'
    icon = '⏰'
    model = VismaTime

    def describe(self, record):
        return f"{record.get('id')} (client {record.get('clientId')}, week {record.get('weekId')})"

    def build_values(self, record):
        return {
            'week_id': record.get('weekId'),
            'status': record.get('status') or DEFAULT_STATUS,
            **day_flags(record, VismaTime.DAYS),
        }


# Dependency order: staff before clients, clients before everything they own
MIGRATION_ORDER = [
    StaffMigrator,
    ClientMigrator,
    CarePlanMigrator,
    WeeklyDocMigrator,
    MonthlyReportMigrator,
    VismaWeekMigrator,
]

DEPENDENT_MIGRATORS = MIGRATION_ORDER[2:]


def run_migrators(export, sink, log):
    """
    Run all six migrators in dependency order.

    Identity maps flow explicitly from the staff migrator into the client
    migrator and from the client migrator into the dependent migrators.
    Returns the outcomes keyed by entity.
    """
    outcomes = {}

    staff = StaffMigrator(sink, log).migrate(export.staff)
    outcomes[staff.entity] = staff

    clients = ClientMigrator(sink, log, RemapTables(staff.identity_map)).migrate(export.clients)
    outcomes[clients.entity] = clients

    remap = RemapTables(staff.identity_map, clients.identity_map)
    sources = {
        'carePlans': export.care_plans,
        'weeklyDocs': export.weekly_docs,
        'monthlyReports': export.monthly_reports,
        'vismaWeeks': export.visma_weeks,
    }
    for migrator_class in DEPENDENT_MIGRATORS:
        outcome = migrator_class(sink, log, remap).migrate(sources[migrator_class.entity])
        outcomes[outcome.entity] = outcome

    return outcomes
