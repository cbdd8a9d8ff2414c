import shutil
from pathlib import Path

from django.utils import timezone

from core.migration_errors import BackupFailure

# Sidecar files SQLite keeps next to a WAL-mode database
SQLITE_SIDECAR_SUFFIXES = ('-wal',)


def backup_timestamp(now=None):
    """Filesystem-safe capture timestamp, unique per call down to the microsecond"""
    now = now or timezone.now()
    return now.strftime('%Y%m%d_%H%M%S_%f')


def is_file_store(store_path):
    """In-memory SQLite databases have nothing on disk to back up"""
    name = str(store_path or '')
    return bool(name) and name != ':memory:' and 'mode=memory' not in name


class BackupManager:
    """Snapshots the destination database before the migration touches it"""

    def __init__(self, store_path, backup_dir, log, dry_run=False, clock=None):
        self.store_path = Path(store_path) if is_file_store(store_path) else None
        self.backup_dir = Path(backup_dir)
        self.log = log
        self.dry_run = dry_run
        self.clock = clock or timezone.now

    def backup_path(self):
        return self.backup_dir / f'database.backup.{backup_timestamp(self.clock())}.db'

    def create_backup(self):
        """
        Copy the database file to a new timestamped backup.

        Returns the backup path, or None when there was nothing to copy
        (fresh install) or when running as a dry run.
        """
        if self.store_path is None or not self.store_path.exists():
            self.log.warning('⚠️  No existing database found - skipping backup')
            return None

        target = self.backup_path()
        if self.dry_run:
            self.log.info(f'📦 [DRY RUN] Would create backup: {target}')
            return None

        if target.exists():
            raise BackupFailure(f'Backup target already exists: {target}')

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.store_path, target)
            for suffix in SQLITE_SIDECAR_SUFFIXES:
                sidecar = Path(f'{self.store_path}{suffix}')
                if sidecar.exists():
                    shutil.copy2(sidecar, Path(f'{target}{suffix}'))
        except OSError as e:
            raise BackupFailure(f'Could not create backup {target}: {e}', raw_error=e) from e

        self.log.info(f'📦 Created backup: {target}')
        return target
