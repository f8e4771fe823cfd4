"""
Development settings for the Air Quality core project.
"""
from .base import *

DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Use console backend for emails in development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Persist subscriptions across restarts in development
AIR_QUALITY_SETTINGS = {
    **AIR_QUALITY_SETTINGS,
    'SUBSCRIPTION_STORE': 'database',
    'CURRENT_CACHE_TTL': 60,
}

# More verbose logging in development
LOGGING['root']['level'] = 'DEBUG'
LOGGING['loggers']['apps']['level'] = 'DEBUG'
