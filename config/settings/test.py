"""Settings used by the pytest suite."""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test-db.sqlite3',  # noqa: F405
        # A file backed test database lets worker threads share committed rows.
        'TEST': {'NAME': BASE_DIR / 'test-db.sqlite3'},  # noqa: F405
        'OPTIONS': {'timeout': 20},
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

STRIPE_SECRET_KEY = 'sk_test_dummy'
STRIPE_WEBHOOK_SECRET = 'whsec_test_secret'
RAZORPAY_KEY_ID = 'rzp_test_dummy'
RAZORPAY_KEY_SECRET = 'rzp_test_secret'
GOOGLE_CLIENT_ID = 'test-client-id.apps.googleusercontent.com'

LOGGING["root"]["level"] = "CRITICAL"  # noqa: F405
LOGGING["loggers"]["apps"]["level"] = "CRITICAL"  # noqa: F405
LOGGING["loggers"]["shared"]["level"] = "CRITICAL"  # noqa: F405
LOGGING["loggers"]["django"]["level"] = "CRITICAL"  # noqa: F405
