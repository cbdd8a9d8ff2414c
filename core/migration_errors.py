"""
Migration Error Code System
Standardized error codes for the V1 -> V2 data migration
"""

# Error Code Categories
MIGRATION_ERROR_CODES = {
    # Input file errors (001-009)
    'MIGRATION_001': {
        'message': 'V1 data file not found.',
        'category': 'file_missing',
        'user_action': 'Export your V1 data first and place it in the expected location, or pass its path as an argument.'
    },
    'MIGRATION_002': {
        'message': 'V1 data file is not valid JSON.',
        'category': 'file_format',
        'user_action': 'Re-export the V1 data and make sure the file is UTF-8 encoded JSON.'
    },

    # Backup errors (010-019)
    'MIGRATION_010': {
        'message': 'Could not create a backup of the existing database.',
        'category': 'backup',
        'user_action': 'Check free disk space and write permissions for the backup directory.'
    },

    # Validation errors (020-029)
    'MIGRATION_020': {
        'message': 'Invalid data structure.',
        'category': 'validation',
        'user_action': 'The export must be a JSON object with "staff" and "clients" arrays.'
    },
    'MIGRATION_021': {
        'message': 'Invalid record in V1 data.',
        'category': 'validation',
        'user_action': 'Fix the listed record in the export and run the migration again.'
    },

    # Database errors (030-049)
    'MIGRATION_030': {
        'message': 'Destination database schema is missing.',
        'category': 'database',
        'user_action': 'Run "python manage.py migrate" to create the V2 tables first.'
    },
    'MIGRATION_040': {
        'message': 'Destination database rejected a record.',
        'category': 'database',
        'user_action': 'Check the record for constraint violations (duplicate email, invalid status, bad date).'
    },

    # Verification errors (050-059)
    'MIGRATION_050': {
        'message': 'Record count validation failed.',
        'category': 'verification',
        'user_action': 'Review the expected vs actual counts in the migration report.'
    },

    # System errors (100-119)
    'MIGRATION_100': {
        'message': 'Unexpected error occurred.',
        'category': 'system',
        'user_action': 'Review the migration report and the application log.'
    },
}


class MigrationError(Exception):
    """Base exception for migration failures with error codes"""

    default_code = 'MIGRATION_100'

    def __init__(self, message=None, code=None, details=None, raw_error=None):
        self.code = code or self.default_code
        entry = MIGRATION_ERROR_CODES.get(self.code, {})
        self.message = message or entry.get('message', 'Unknown error')
        self.details = details or {}
        self.raw_error = raw_error
        self.category = entry.get('category', 'unknown')
        self.user_action = entry.get('user_action', 'Please try again.')
        super().__init__(self.message)

    def to_log_dict(self):
        """Convert error to dictionary for logging"""
        return {
            'error_code': self.code,
            'error_message': self.message,
            'error_category': self.category,
            'details': self.details,
            'raw_error': str(self.raw_error) if self.raw_error else None,
        }


class StructuralValidationError(MigrationError):
    """The V1 export is missing, unreadable or structurally invalid"""

    default_code = 'MIGRATION_020'


class BackupFailure(MigrationError):
    default_code = 'MIGRATION_010'


class SchemaMissingError(MigrationError):
    default_code = 'MIGRATION_030'


class WriteFailure(MigrationError):
    """The destination store rejected a row; aborts the whole run"""

    default_code = 'MIGRATION_040'

    def __init__(self, entity, legacy_id, raw_error):
        self.entity = entity
        self.legacy_id = legacy_id
        super().__init__(
            message=f'Failed to migrate {entity} {legacy_id}: {raw_error}',
            details={'entity': entity, 'legacy_id': legacy_id},
            raw_error=raw_error,
        )


class CountMismatchError(MigrationError):
    """Post-migration row counts disagree with what the migrators reported"""

    default_code = 'MIGRATION_050'

    def __init__(self, mismatches):
        self.mismatches = mismatches
        summary = ', '.join(
            f'{entity}: expected +{expected}, actual +{actual}'
            for entity, (expected, actual) in mismatches.items()
        )
        super().__init__(
            message=f'Count validation failed ({summary})',
            details={'mismatches': {k: {'expected': e, 'actual': a} for k, (e, a) in mismatches.items()}},
        )
