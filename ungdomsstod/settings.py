"""
Django settings for the Ungdomsstöd V2 data store and its V1 migration tooling.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-dev-key-change-in-production')

DEBUG = os.environ.get('DJANGO_DEBUG', 'False').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'rest_framework',
    'core',
    'clients',
]

# SQLite store shared with the V2 server. Django's SQLite backend enables
# PRAGMA foreign_keys on every connection; EXCLUSIVE keeps other processes
# from reading or writing while a migration transaction is open.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DB_PATH', str(BASE_DIR / 'data' / 'ungdomsstod.db')),
        'OPTIONS': {
            'transaction_mode': 'EXCLUSIVE',
        },
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'sv-se'
TIME_ZONE = 'Europe/Stockholm'
USE_I18N = True
USE_TZ = True

_backup_dir = os.environ.get('MIGRATION_BACKUP_DIR', str(BASE_DIR / 'backups'))

V1_MIGRATION = {
    'DATA_PATH': os.environ.get('V1_EXPORT_PATH', str(BASE_DIR / 'v1-export.json')),
    'BACKUP_DIR': _backup_dir,
    'REPORT_DIR': os.environ.get('MIGRATION_REPORT_DIR', _backup_dir),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        # Migration progress is already mirrored to the command's stdout;
        # the console handler only repeats warnings and errors.
        'core': {
            'handlers': ['console'],
            'level': os.environ.get('MIGRATION_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
    },
}
