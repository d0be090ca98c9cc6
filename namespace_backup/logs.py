"""
Logging setup

Modules log through the standard library. Records are rendered by structlog,
either as JSON lines or as plain console text.
"""

import logging
import logging.config
from typing import Any, Dict, MutableMapping, Tuple

import structlog

from namespace_backup.exceptions import ConfigurationError

_sl_foreign_pre_chain = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt='iso', utc=True),
]


def init_logging(*, level: str = 'DEBUG', formatter: str = 'plain') -> None:
    logging_config: Dict[str, Any] = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'plain': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processors': [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(colors=False),
                ],
                'foreign_pre_chain': _sl_foreign_pre_chain,
            },
            'json': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processors': [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
                'foreign_pre_chain': _sl_foreign_pre_chain,
            },
        },
        'handlers': {
            'console': {
                'level': None,  # Filled in
                'class': 'logging.StreamHandler',
                'formatter': None,  # Filled in
                'stream': 'ext://sys.stderr',
            },
        },
        'loggers': {
            '': {
                'handlers': ['console'],
                'level': 'DEBUG',
                'propagate': True,
            },
        },
    }

    if formatter not in logging_config['formatters']:
        raise ConfigurationError(f'Log format {formatter} is unknown.')

    level = level.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f'Log level {level} is unknown.')

    logging_config['handlers']['console']['formatter'] = formatter
    logging_config['handlers']['console']['level'] = level

    logging.config.dictConfig(logging_config)

    # The Kubernetes client logs every request at DEBUG
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('kubernetes').setLevel(logging.INFO)


class RequestLogger(logging.LoggerAdapter):
    """
    Adds per-request fields (uri, uid, namespace) to every record
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs

    def bind(self, **fields: Any) -> 'RequestLogger':
        return RequestLogger(self.logger, {**self.extra, **fields})
