"""
V1 -> V2 migration controller.

Runs one migration end to end: backup, load and validate the V1 export, then
either simulate (dry run) or migrate inside a single transaction, verify the
row-count deltas and commit or roll back. Every logged line ends up in the
migration report.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from django.db import DEFAULT_DB_ALIAS, connections, transaction
from django.utils import timezone

from clients.models import CarePlan, MonthlyReport, VismaTime, WeeklyDoc
from core.backup import BackupManager, backup_timestamp
from core.entity_migrators import run_migrators
from core.legacy_validation import load_export, validate_export
from core.migration_errors import (
    CountMismatchError, MigrationError, SchemaMissingError, StructuralValidationError,
)
from core.migration_log import MigrationLog
from core.models import Client, User
from core.write_sinks import DatabaseSink, DryRunSink

logger = logging.getLogger(__name__)

# Entity key -> destination model, in migration order
ENTITY_MODELS = {
    'staff': User,
    'clients': Client,
    'carePlans': CarePlan,
    'weeklyDocs': WeeklyDoc,
    'monthlyReports': MonthlyReport,
    'vismaWeeks': VismaTime,
}

ENTITY_LABELS = {
    'staff': 'Staff',
    'clients': 'Clients',
    'carePlans': 'Care Plans',
    'weeklyDocs': 'Weekly Docs',
    'monthlyReports': 'Monthly Reports',
    'vismaWeeks': 'Visma Weeks',
}


class MigrationState(Enum):
    INIT = 'init'
    BACKED_UP = 'backed_up'
    VALIDATED = 'validated'
    SIMULATED = 'simulated'
    DONE = 'done'
    COUNTING_PRE = 'counting_pre'
    IN_TRANSACTION = 'in_transaction'
    COUNTING_POST = 'counting_post'
    VERIFYING = 'verifying'
    COMMITTED = 'committed'
    ROLLED_BACK = 'rolled_back'
    FAILED = 'failed'
    REPORTED = 'reported'


SUCCESS_STATES = (MigrationState.COMMITTED, MigrationState.DONE)


@dataclass
class MigrationResult:
    success: bool
    state: MigrationState
    dry_run: bool
    migrated: Dict[str, int] = field(default_factory=dict)
    skipped: Dict[str, int] = field(default_factory=dict)
    pre_counts: Dict[str, int] = field(default_factory=dict)
    post_counts: Dict[str, int] = field(default_factory=dict)
    backup_path: Optional[Path] = None
    report_path: Optional[Path] = None
    error: Optional[MigrationError] = None
    history: List[MigrationState] = field(default_factory=list)


def format_counts(counts):
    return ', '.join(f'{ENTITY_LABELS[entity]}: {counts.get(entity, 0)}' for entity in ENTITY_MODELS)


class V1ToV2Migration:
    """One migration run; construct a new instance per run"""

    def __init__(self, data_path, backup_dir, report_dir=None, store_path=None,
                 dry_run=False, log=None, using=DEFAULT_DB_ALIAS, clock=None):
        self.data_path = Path(data_path)
        self.backup_dir = Path(backup_dir)
        self.report_dir = Path(report_dir) if report_dir else self.backup_dir
        self.using = using
        self.store_path = store_path or connections[using].settings_dict['NAME']
        self.dry_run = dry_run
        self.log = log or MigrationLog()
        self.clock = clock or timezone.now
        self.state = MigrationState.INIT
        self.history = [MigrationState.INIT]
        self.outcomes = {}
        self.pre_counts = {}
        self.post_counts = {}
        self.backup_path = None
        self.error = None

    def transition(self, state):
        logger.debug('migration state %s -> %s', self.state.value, state.value)
        self.state = state
        self.history.append(state)

    # --- stages ---------------------------------------------------------

    def backup(self):
        manager = BackupManager(self.store_path, self.backup_dir, self.log, dry_run=self.dry_run, clock=self.clock)
        self.backup_path = manager.create_backup()
        self.transition(MigrationState.BACKED_UP)

    def load_and_validate(self):
        try:
            export = validate_export(load_export(self.data_path))
        except StructuralValidationError as e:
            self.log.error(f'❌ V1 data validation failed: {e.message}')
            if e.details.get('errors'):
                self.log.error(f'   Field errors: {e.details["errors"]}')
            if e.code == 'MIGRATION_001':
                self.log.info('💡 Please export your V1 data first and place it in the expected location')
            raise

        for staff_id, role in export.coerced_roles:
            self.log.warning(f"  ⚠️  Staff {staff_id} has invalid role {role!r} - defaulting to 'staff'")
        self.log.success('✅ V1 data validation passed')
        if export.version:
            self.log.info(f'📦 V1 export version: {export.version}')
        self.log.info(f'📊 Found V1 data: {len(export.staff)} staff, {len(export.clients)} clients')

        self.transition(MigrationState.VALIDATED)
        return export

    def check_schema(self):
        connection = connections[self.using]
        existing = set(connection.introspection.table_names())
        missing = [model._meta.db_table for model in ENTITY_MODELS.values() if model._meta.db_table not in existing]
        if missing:
            raise SchemaMissingError(
                f'Destination tables missing: {", ".join(missing)}. Run "python manage.py migrate" first.',
                details={'missing_tables': missing},
            )

    def count_records(self):
        return {
            entity: model.objects.using(self.using).count()
            for entity, model in ENTITY_MODELS.items()
        }

    def verify_counts(self):
        self.transition(MigrationState.VERIFYING)
        self.log.info('📊 Migration count validation:')
        mismatches = {}
        for entity in ENTITY_MODELS:
            expected = self.outcomes[entity].migrated
            actual = self.post_counts[entity] - self.pre_counts[entity]
            self.log.info(f'   {ENTITY_LABELS[entity]}: expected +{expected}, actual +{actual}')
            if expected != actual:
                mismatches[entity] = (expected, actual)

        if mismatches:
            self.log.error('❌ Count validation FAILED! Expected vs actual counts do not match.')
            raise CountMismatchError(mismatches)
        self.log.success('✅ Count validation PASSED!')

    def simulate(self, export):
        sink = DryRunSink()
        self.outcomes = run_migrators(export, sink, self.log)
        planned = {entity: sink.count(model) for entity, model in ENTITY_MODELS.items()}
        self.log.info(f'📊 [DRY RUN] Rows that would be written: {format_counts(planned)}')
        if sink.rejections:
            self.log.warning(
                f'⚠️  [DRY RUN] {len(sink.rejections)} rows would be rejected by the live run, '
                'which would then be rolled back'
            )
        self.transition(MigrationState.SIMULATED)
        self.transition(MigrationState.DONE)

    def migrate_live(self, export):
        self.check_schema()

        self.transition(MigrationState.COUNTING_PRE)
        self.pre_counts = self.count_records()
        self.log.info(f'📊 Pre-migration counts: {format_counts(self.pre_counts)}')

        self.log.info('🔄 Starting database transaction...')
        try:
            with transaction.atomic(using=self.using):
                self.transition(MigrationState.IN_TRANSACTION)
                self.outcomes = run_migrators(export, DatabaseSink(self.using), self.log)

                self.transition(MigrationState.COUNTING_POST)
                self.post_counts = self.count_records()
                self.log.info(f'📊 Post-migration counts: {format_counts(self.post_counts)}')

                self.verify_counts()
                self.log.info('✅ Committing transaction...')
        except Exception:
            self.log_rollback()
            raise

        self.transition(MigrationState.COMMITTED)

    def log_rollback(self):
        connection = connections[self.using]
        if connection.connection is None or connection.needs_rollback:
            self.log.error('❌ Failed to rollback transaction cleanly; the uncommitted changes are discarded with the connection')
        else:
            self.log.warning('🚫 Transaction rolled back - no changes were made to the database')
        self.transition(MigrationState.ROLLED_BACK)

    # --- run ------------------------------------------------------------

    def run(self):
        if self.dry_run:
            self.log.info('🧪 Starting V1 → V2 migration (DRY RUN - no changes will be made)...')
        else:
            self.log.info('🚀 Starting V1 → V2 migration...')

        try:
            self.backup()
            export = self.load_and_validate()
            if self.dry_run:
                self.simulate(export)
            else:
                self.migrate_live(export)
        except MigrationError as e:
            self.fail(e)
        except Exception as e:
            logger.exception('Unexpected error during V1 -> V2 migration')
            self.fail(MigrationError(f'Unexpected error: {e}', raw_error=e))

        final_state = self.state
        self.log_summary(final_state)
        report_path = self.write_report()

        return MigrationResult(
            success=final_state in SUCCESS_STATES,
            state=final_state,
            dry_run=self.dry_run,
            migrated={entity: outcome.migrated for entity, outcome in self.outcomes.items()},
            skipped={entity: outcome.skipped for entity, outcome in self.outcomes.items()},
            pre_counts=self.pre_counts,
            post_counts=self.post_counts,
            backup_path=self.backup_path,
            report_path=report_path,
            error=self.error,
            history=list(self.history),
        )

    def fail(self, error):
        self.error = error
        logger.error('V1 -> V2 migration failed: %s', error.to_log_dict())
        self.log.error(f'❌ Migration failed: {error.message}')
        if self.state != MigrationState.ROLLED_BACK:
            self.transition(MigrationState.FAILED)

    def log_summary(self, final_state):
        if final_state == MigrationState.DONE:
            self.log.success('🧪 DRY RUN completed successfully! No changes were made to the database.')
            self.log.info('💡 Run without --dry-run flag to perform actual migration.')
        elif final_state == MigrationState.COMMITTED:
            self.log.success('🎉 V1 → V2 migration completed successfully!')
            self.log.warning('🔐 All migrated users need to reset their passwords')
        elif final_state == MigrationState.ROLLED_BACK:
            self.log.error('❌ Migration failed - all changes were rolled back')
        else:
            self.log.error('❌ Migration failed - no changes were made to the database')
        self.log.info('📋 Review the migration report for any issues')

    def write_report(self):
        path = self.report_dir / f'migration-report-{backup_timestamp(self.clock())}.txt'
        try:
            self.log.write_report(path)
        except OSError as e:
            logger.error('Could not write migration report %s: %s', path, e)
            self.log.error(f'❌ Could not write migration report {path}: {e}')
            return None
        self.log.info(f'📄 Migration report saved: {path}')
        self.transition(MigrationState.REPORTED)
        return path
