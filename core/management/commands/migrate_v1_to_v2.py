from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import DEFAULT_DB_ALIAS, connections

from core.migration_log import MigrationLog
from core.v1_migration import V1ToV2Migration


class Command(BaseCommand):
    help = 'Migrate the V1 localStorage export into the V2 database'

    def add_arguments(self, parser):
        parser.add_argument(
            'data_path',
            nargs='?',
            default=None,
            help='Path to the V1 export JSON (defaults to V1_MIGRATION["DATA_PATH"])',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Run every step without writing to the database',
        )
        parser.add_argument(
            '--database',
            default=DEFAULT_DB_ALIAS,
            help='Database alias to migrate into',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        using = options['database']
        config = getattr(settings, 'V1_MIGRATION', {})
        data_path = options['data_path'] or config.get('DATA_PATH')
        if not data_path:
            raise CommandError('No V1 data path given and V1_MIGRATION["DATA_PATH"] is not set', returncode=1)

        self.stdout.write('\n🔄 Ungdomsstöd V1 → V2 Data Migration')
        self.stdout.write('=' * 40)
        self.stdout.write(f'📁 Data file: {data_path}')
        self.stdout.write(f'🗄️  Database: {connections[using].settings_dict["NAME"]}')
        if dry_run:
            self.stdout.write(self.style.WARNING('🧪 Mode: DRY RUN (no changes will be made)'))
        else:
            self.stdout.write(self.style.WARNING('🚀 Mode: LIVE MIGRATION'))
            self.stdout.write('🛡️  Safety features: automatic backup, single transaction, count validation, rollback on error')
        self.stdout.write('')

        migration = V1ToV2Migration(
            data_path=data_path,
            backup_dir=config.get('BACKUP_DIR', settings.BASE_DIR / 'backups'),
            report_dir=config.get('REPORT_DIR'),
            dry_run=dry_run,
            log=MigrationLog(self.stdout, self.style),
            using=using,
        )
        result = migration.run()

        if not result.success:
            error = result.error
            if error is not None:
                self.stderr.write(f'{error.code}: {error.user_action}')
            raise CommandError('V1 → V2 migration failed', returncode=1)

        self.stdout.write(self.style.SUCCESS('\n✨ Migration script completed'))
