"""JSON logging for processes embedding shortlinks

Library modules only create module-level loggers. The embedding process calls
`initialize_logging()` once at start-up to route every record to stdout as one
JSON object per line:

{
    "timestamp": "2026-10-19T12:00:00.000Z",
    "level": "INFO",
    "logger": "shortlinks.service.shortened_url_service",
    "message": "Created short URL.",
    "app": "shortlinks",
    "env": "prod",
    "uniqueKey": "x7k2p",
    "attempt": 1
}

Fields passed through `extra={...}` are appended as top-level keys.
"""

import os
import json
import logging
import logging.config
from collections.abc import Mapping
from datetime import datetime, UTC
from typing import Any

from shortlinks.constants import ENV


# Attributes every LogRecord carries, as opposed to `extra` fields
_RECORD_ATTRS = frozenset(vars(logging.LogRecord('', logging.NOTSET, '', 0, '', None, None))) | {'message', 'asctime'}

# Chatty third-party loggers capped at WARNING
_QUIET_LOGGERS = ('botocore', 'boto3', 'urllib3')


class JsonFormatter(logging.Formatter):
    """Render a LogRecord, its `extra` fields and static process fields as JSON"""

    def __init__(self, static_fields: Mapping[str, Any] | None = None):
        super().__init__()
        self.static_fields = {k: v for k, v in (static_fields or {}).items() if v is not None}

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec='milliseconds') \
                            .replace('+00:00', 'Z')
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            **self.static_fields,
        }
        log.update((key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        return json.dumps(log, default=str)


def initialize_logging(level: str | None = None) -> None:
    """Install the JSON stdout handler on the root logger

    Args:
        level (Optional[str]):
            Root level name. Falls back to LOG_LEVEL, then INFO.
    """
    log_level = (level or os.getenv(ENV.App.LOG_LEVEL) or 'INFO').upper()
    static_fields = {
        'app': os.getenv(ENV.App.APP_NAME),
        'env': os.getenv(ENV.App.APP_ENV),
    }

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                    'static_fields': static_fields,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': 'WARNING'} for name in _QUIET_LOGGERS},
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
