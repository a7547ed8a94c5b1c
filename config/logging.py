"""
Logging configuration shared by the management commands.

Console output always; set LOG_TO_FILE to also write logs/token-lifecycle.log.
"""
import os

from decouple import config

LOG_LEVEL = config('LOG_LEVEL', default='INFO').upper()
LOG_TO_FILE = config('LOG_TO_FILE', default=False, cast=bool)

LOGS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'logs')

HANDLERS = ['console']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'level': 'DEBUG',
        },
    },
    'loggers': {
        '': {  # Root logger
            'handlers': HANDLERS,
            'level': LOG_LEVEL,
        },
        'django': {
            'handlers': HANDLERS,
            'level': 'WARNING',
            'propagate': False,
        },
        'tokens': {
            'handlers': HANDLERS,
            'level': LOG_LEVEL,
            'propagate': False,
        },
        # solana-py logs every RPC round trip through httpx
        'httpx': {
            'handlers': HANDLERS,
            'level': 'WARNING',
            'propagate': False,
        },
    },
}

if LOG_TO_FILE:
    # Ensure the logs directory exists
    os.makedirs(LOGS_DIR, exist_ok=True)
    LOGGING['handlers']['file'] = {
        'class': 'logging.FileHandler',
        'filename': os.path.join(LOGS_DIR, 'token-lifecycle.log'),
        'formatter': 'verbose',
        'level': 'DEBUG',
    }
    HANDLERS.append('file')
