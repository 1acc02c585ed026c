"""
Land Administration Back Office - Django Settings
Values are read from the environment with development defaults
"""

import os
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-only-land-admin-secret-key')
DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() in ('1', 'true', 'yes')
ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]


# ============================================================================
# APPLICATIONS
# ============================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'land_registry',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'land_admin.urls'
WSGI_APPLICATION = 'land_admin.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

AUTH_USER_MODEL = 'land_registry.User'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ============================================================================
# DATABASE
# ============================================================================

DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'land_admin'),
            'USER': os.environ.get('DB_USER', 'land_admin'),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
        }
    }


# ============================================================================
# CACHE
# ============================================================================

REDIS_URL = os.environ.get('REDIS_URL')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.redis.RedisCache',
            'LOCATION': REDIS_URL,
            'KEY_PREFIX': 'land_admin',
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'land-admin',
        }
    }

LAND_TRANSFER_CACHE_ALIAS = os.environ.get('LAND_TRANSFER_CACHE_ALIAS', 'default')

# Seconds
LAND_TRANSFER_CACHE_TTLS = {
    'transfer': 600,
    'list': 300,
    'history': 900,
    'stats': 1800,
    'user': 600,
    'district': 1200,
    'preload': 1800,
}


# ============================================================================
# LAND TRANSFER WORKFLOW
# ============================================================================

LAND_TRANSFER_TAX_RATE = Decimal(os.environ.get('LAND_TRANSFER_TAX_RATE', '0.05'))

RABBITMQ_URL = os.environ.get('RABBITMQ_URL')

LAND_EVENTS = {
    'BACKEND': (
        'land_registry.events.RabbitMQEventBackend' if RABBITMQ_URL
        else 'land_registry.events.LoggingEventBackend'
    ),
    'URL': RABBITMQ_URL,
    'EXCHANGE': os.environ.get('LAND_EVENTS_EXCHANGE', 'land_events'),
    'SOURCE': 'land-admin-api',
    'VERSION': '1.0.0',
}


# ============================================================================
# LOGGING
# ============================================================================

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'land_registry': {
            'level': LOG_LEVEL,
        },
        'pika': {
            'level': 'WARNING',
        },
    },
}


# ============================================================================
# INTERNATIONALIZATION & STATIC FILES
# ============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Africa/Kigali'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
