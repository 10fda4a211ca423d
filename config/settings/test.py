# config/settings/test.py

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

SECRET_KEY = 'test-secret-key-not-for-production-use-0123456789'
AUTH_TOKEN_SECRET = 'test-token-secret-not-for-production-use-0123456789'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'taskflow-test-cache',
    }
}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

# Fast hashing for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

# No log output during tests
LOGGING['handlers'] = {}
LOGGING['root'] = {'handlers': [], 'level': 'WARNING'}
LOGGING['loggers'] = {}
