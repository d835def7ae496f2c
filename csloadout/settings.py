"""
Django settings for the csloadout.gg project.

Everything environment specific is read from the process environment (a
``.env`` file is loaded first when present). Without a PostgreSQL
configuration the project falls back to SQLite, which is also what the test
suite runs against.

For more information on this file, see
https://docs.djangoproject.com/en/5.1/topics/settings/ and
https://docs.djangoproject.com/en/5.1/ref/settings/
"""
from __future__ import annotations

import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

from csloadout.logging import setup_logging

BASE_DIR: Path = Path(__file__).resolve().parent.parent

# Development fallback only; production must set SECRET_KEY.
SECRET_KEY: str = os.environ.get('SECRET_KEY', 'django-insecure-csloadout-dev-key')

# DEBUG must be False in production!
DEBUG: bool = os.environ.get('DEBUG', 'False').lower() == 'true'

ALLOWED_HOSTS_str: str = os.environ.get('DJANGO_ALLOWED_HOSTS')
ALLOWED_HOSTS: list[str] = ALLOWED_HOSTS_str.split(',') if ALLOWED_HOSTS_str else ['127.0.0.1', 'localhost', 'testserver']

# Needed behind a reverse proxy
CSRF_TRUSTED_ORIGINS_str = os.environ.get('CSRF_TRUSTED_ORIGINS', '')
CSRF_TRUSTED_ORIGINS: list[str] = CSRF_TRUSTED_ORIGINS_str.split(',') if CSRF_TRUSTED_ORIGINS_str else []

SITE_URL: str = os.environ.get('SITE_URL', 'http://localhost:8000').rstrip('/')

LOGIN_URL = "/accounts/steam/login/"
LOGIN_REDIRECT_URL = "inventory_page"
LOGOUT_REDIRECT_URL = "home"

# Application definition

INSTALLED_APPS: list[str] = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'django.contrib.sites',  # Required by allauth

    'rest_framework',

    # Apps
    'accounts',
    'catalog',
    'inventory',
    'loadouts',
    'alerts',

    'allauth',
    'allauth.account',
    'allauth.socialaccount',
    'allauth.socialaccount.providers.openid',  # Required by the steam provider
    'allauth.socialaccount.providers.steam',
]

SITE_ID = 1  # Required by django.contrib.sites
SOCIALACCOUNT_LOGIN_ON_GET = True
SOCIALACCOUNT_AUTO_SIGNUP = True
SOCIALACCOUNT_EMAIL_VERIFICATION = 'none'
SOCIALACCOUNT_ADAPTER = 'accounts.adapters.SteamSocialAccountAdapter'

MIDDLEWARE: list[str] = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',

    'allauth.account.middleware.AccountMiddleware',
]

ROOT_URLCONF: str = 'csloadout.urls'

TEMPLATES: list[dict[str, object]] = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'csloadout.urls.global_settings_context',
            ],
        },
    },
]

WSGI_APPLICATION: str = 'csloadout.wsgi.application'

# Database
# https://docs.djangoproject.com/en/5.1/ref/settings/#databases
if os.environ.get('POSTGRES_DB') and os.environ.get('POSTGRES_USER'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ.get('POSTGRES_DB'),
            'USER': os.environ.get('POSTGRES_USER'),
            'PASSWORD': os.environ.get('POSTGRES_PASSWORD'),
            'HOST': os.environ.get('POSTGRES_HOST', 'localhost'),
            'PORT': os.environ.get('POSTGRES_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

AUTHENTICATION_BACKENDS: list[str] = [
    # Needed to login by username in Django admin, regardless of allauth
    'django.contrib.auth.backends.ModelBackend',

    # allauth specific authentication methods (Steam OpenID)
    'allauth.account.auth_backends.AuthenticationBackend',
]

ACCOUNT_LOGIN_METHODS = ['username']
ACCOUNT_SIGNUP_FIELDS = ['username']
ACCOUNT_EMAIL_VERIFICATION = 'none'

# Steam Web API key. allauth's Steam provider reads it as the app secret.
STEAM_API_KEY = os.environ.get('STEAM_API_KEY', '')

SOCIALACCOUNT_PROVIDERS = {
    'steam': {
        'APP': {
            'client_id': 'steam',
            'secret': STEAM_API_KEY,
        },
    }
}

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'EXCEPTION_HANDLER': 'csloadout.errors.api_exception_handler',
}

LANGUAGE_CODE = 'en-us'

TIME_ZONE: str = 'UTC'

USE_I18N: bool = True

USE_TZ: bool = True

# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/5.1/howto/static-files/

STATIC_URL: str = '/static/'
STATICFILES_DIRS: list[Path] = [BASE_DIR / 'static']
STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# Default primary key field type
# https://docs.djangoproject.com/en/5.1/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD: str = 'django.db.models.BigAutoField'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'cache-location',
        'TIMEOUT': 60 * 60,
    }
}

EMAIL_BACKEND = os.environ.get(
    'EMAIL_BACKEND',
    'django.core.mail.backends.console.EmailBackend'
)

EMAIL_HOST = os.environ.get('EMAIL_HOST')
EMAIL_PORT = int(os.environ.get('EMAIL_PORT', 587))
EMAIL_USE_TLS = os.environ.get('EMAIL_USE_TLS', 'True').lower() == 'true'
EMAIL_HOST_USER = os.environ.get('EMAIL_HOST_USER')
EMAIL_HOST_PASSWORD = os.environ.get('EMAIL_HOST_PASSWORD')
DEFAULT_FROM_EMAIL = os.environ.get('DEFAULT_FROM_EMAIL', 'alerts@csloadout.gg')

# Shared secret for the cron endpoints (Authorization: Bearer <secret>)
CRON_SECRET = os.environ.get('CRON_SECRET')

# Salt for hashing visitor IP addresses (consent records, loadout views)
IP_HASH_SALT = os.environ.get('IP_HASH_SALT', '')

# Web Push (VAPID)
VAPID_PUBLIC_KEY = os.environ.get('VAPID_PUBLIC_KEY', '')
VAPID_PRIVATE_KEY = os.environ.get('VAPID_PRIVATE_KEY', '')
VAPID_SUBJECT = os.environ.get('VAPID_SUBJECT', 'mailto:support@csloadout.gg')

# Inventory import
INVENTORY_CACHE_TTL_HOURS = int(os.environ.get('INVENTORY_CACHE_TTL_HOURS', 6))
INVENTORY_PAGE_DELAY_SECONDS = float(os.environ.get('INVENTORY_PAGE_DELAY_SECONDS', 1.0))
INVENTORY_REFRESH_DELAY_SECONDS = float(os.environ.get('INVENTORY_REFRESH_DELAY_SECONDS', 5.0))
GDPR_RETENTION_DAYS = int(os.environ.get('GDPR_RETENTION_DAYS', 90))
CONSENT_VERSION = '1.0'

# Price alerts
ALERT_COOLDOWN_MINUTES = int(os.environ.get('ALERT_COOLDOWN_MINUTES', 15))

# Steam Market price overview: requests per minute
STEAM_MARKET_REQUESTS_PER_MINUTE = int(os.environ.get('STEAM_MARKET_REQUESTS_PER_MINUTE', 20))

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO')

setup_logging(debug=DEBUG, level=LOG_LEVEL)
