"""
Logging configuration
Console output plus a rotating log file
"""
import os
import logging
import logging.config

from app.config import settings


def build_logging_config(log_level: str, log_file: str) -> dict:
    """Build the dictConfig for the service"""
    handlers = {
        'console': {
            'level': log_level,
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    }
    if log_file:
        handlers['file'] = {
            'level': log_level,
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': log_file,
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5,
            'formatter': 'standard',
            'encoding': 'utf8',
        }

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
        },
        'handlers': handlers,
        'loggers': {
            '': {
                'handlers': list(handlers),
                'level': log_level,
            },
            # httpx logs every request at INFO
            'httpx': {
                'level': 'WARNING',
            },
        },
    }


def setup_logging() -> None:
    """Configure logging from settings"""
    log_level = settings.LOG_LEVEL.upper()
    log_file = settings.LOG_FILE

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_level, log_file))
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
