import logging
import logging.handlers
import os
import sys
import uuid
import json
from .settings import settings

STANDARD_FORMAT = '%(asctime)s - %(levelname)s - [%(request_id)s] - %(name)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - [%(request_id)s] - %(message)s'

# Third-party loggers that drown out the access log at INFO
QUIET_LOGGERS = {
    'uvicorn.access': logging.WARNING,
    'sqlalchemy.engine': logging.WARNING,
    'passlib': logging.ERROR,
}


class RequestIdFilter(logging.Filter):
    """Stamps each record with the id of the request being served, or '-'."""
    def __init__(self, name=''):
        super().__init__(name)
        self.request_id = None

    def filter(self, record):
        if not getattr(record, 'request_id', None):
            record.request_id = self.request_id or '-'
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""
    def format(self, record):
        entry = {
            'timestamp': self.formatTime(record, self.datefmt),
            'app': settings.APP_NAME,
            'level': record.levelname,
            'logger': record.name,
            'request_id': getattr(record, 'request_id', '-'),
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _rotated_name(default_name: str) -> str:
    # bug-tracker.log.2025-11-02 -> bug-tracker_2025-11-02.log
    stem, _, suffix = default_name.replace('.log', '').rpartition('.')
    if stem:
        return f"{stem}_{suffix}.log"
    return default_name


def _build_file_handler(formatter: logging.Formatter, request_id_filter: RequestIdFilter) -> logging.Handler:
    os.makedirs(settings.LOG_DIR, exist_ok=True)

    handler = logging.handlers.TimedRotatingFileHandler(
        os.path.join(settings.LOG_DIR, f"{settings.LOG_FILENAME_PREFIX}.log"),
        when='midnight',
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(request_id_filter)
    handler.namer = _rotated_name
    return handler


def setup_logging():
    """
    Configure the root logger: stdout always, a daily rotating file when
    LOG_TO_FILE is set. Safe to call more than once; handlers are replaced.

    Returns:
        (module logger, the RequestIdFilter shared with LoggingMiddleware)
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    formatter = JsonFormatter() if settings.LOG_FORMAT == 'json' else logging.Formatter(STANDARD_FORMAT)
    request_id_filter = RequestIdFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.addFilter(request_id_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [console_handler]

    if settings.LOG_TO_FILE:
        root_logger.addHandler(_build_file_handler(formatter, request_id_filter))

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging setup complete (level={settings.LOG_LEVEL}, file={settings.LOG_TO_FILE})",
        extra={"request_id": "startup"}
    )

    return logger, request_id_filter


def get_request_id():
    """Generate a unique request ID."""
    return str(uuid.uuid4())
