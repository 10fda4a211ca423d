# config/settings/development.py

from .base import *

# === DEVELOPMENT ===

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '0.0.0.0']

# === DATABASE ===

# PostgreSQL by default, same as production.
# DATABASE_URL wins over the individual variables.
if env('DATABASE_URL', default=None):
    import dj_database_url

    DATABASES['default'] = dj_database_url.parse(env('DATABASE_URL'), conn_max_age=600)
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': env('DB_NAME', default='taskflow_board'),
            'USER': env('DB_USER', default='taskflow_user'),
            'PASSWORD': env('DB_PASSWORD', default='taskflow123'),
            'HOST': env('DB_HOST', default='localhost'),
            'PORT': env('DB_PORT', default='5432'),
            'OPTIONS': {
                'sslmode': 'prefer',
            },
            'CONN_MAX_AGE': 60,
        }
    }

# SQLite only when explicitly requested
if env('USE_SQLITE', cast=bool, default=False):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

# === LOGGING ===

LOGGING['handlers']['console']['level'] = 'DEBUG'
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['apps']['level'] = 'DEBUG'

LOGGING['loggers']['django.db.backends'] = {
    'handlers': ['console'],
    'level': 'INFO',
    'propagate': False,
}

# === CACHE ===

# Local memory cache unless Redis is configured
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'taskflow-dev-cache',
    }
}

if env('REDIS_URL', default=None):
    CACHES['default'] = {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': env('REDIS_URL'),
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
        }
    }
    CHANNEL_LAYERS = {
        'default': {
            'BACKEND': 'channels_redis.core.RedisChannelLayer',
            'CONFIG': {
                'hosts': [env('REDIS_URL')],
            },
        },
    }
else:
    # Single-process channel layer
    CHANNEL_LAYERS = {
        'default': {
            'BACKEND': 'channels.layers.InMemoryChannelLayer'
        }
    }

# Relaxed cookies for local work
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# shell_plus
SHELL_PLUS_IMPORTS = [
    'from apps.core.models import *',
    'from apps.board.store import board_store, project_store, task_store',
    'from apps.board import ordering',
]
