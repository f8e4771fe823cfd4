"""
Test settings for the Air Quality core project.
"""
from .base import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

# No Redis in tests: components get their primary store injected explicitly
AIR_QUALITY_SETTINGS = {
    **AIR_QUALITY_SETTINGS,
    'REDIS_URL': '',
    'CACHE_CONNECT_TIMEOUT': 0.5,
    'SUBSCRIPTION_STORE': 'memory',
    'SMS_GATEWAY_URL': '',
    'DISPATCH_WORKERS': 2,
    'MAX_RETRIES': 0,
}

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['apps']['level'] = 'WARNING'
