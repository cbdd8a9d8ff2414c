import logging
from pathlib import Path

from django.utils import timezone

logger = logging.getLogger(__name__)


class MigrationLog:
    """
    Audit trail for one migration run.

    Every line is timestamped, kept in memory for the migration report,
    forwarded to the Python logger and, when a command stdout is attached,
    echoed to the operator with Django's output styles.
    """

    def __init__(self, stdout=None, style=None):
        self.lines = []
        self.stdout = stdout
        self.style = style

    def _emit(self, level, message, style_name=None):
        line = f'[{timezone.now().isoformat()}] {message}'
        self.lines.append(line)
        logger.log(level, message)
        if self.stdout is not None:
            styler = getattr(self.style, style_name, None) if (self.style and style_name) else None
            self.stdout.write(styler(line) if styler else line)

    def info(self, message):
        self._emit(logging.INFO, message)

    def success(self, message):
        self._emit(logging.INFO, message, 'SUCCESS')

    def warning(self, message):
        self._emit(logging.WARNING, message, 'WARNING')

    def error(self, message):
        self._emit(logging.ERROR, message, 'ERROR')

    def write_report(self, path):
        """Append all collected lines to the report file at ``path``"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'a', encoding='utf-8') as f:
            f.write('\n'.join(self.lines) + '\n')
        return path
