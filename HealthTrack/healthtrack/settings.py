"""
Django settings for the HealthTrack project.

Values come from environment variables, optionally loaded from a ``.env``
file at the repository root via python-dotenv.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent

load_dotenv(PROJECT_ROOT / '.env')


def env_str(key, default=''):
    val = os.getenv(key, '').strip()
    return val if val else default


def env_bool(key, default=False):
    val = os.getenv(key, '').strip().lower()
    if val in {'1', 'true', 'yes', 'on'}:
        return True
    if val in {'0', 'false', 'no', 'off'}:
        return False
    return default


def env_float(key, default):
    val = os.getenv(key, '').strip()
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def env_list(key, default=()):
    val = os.getenv(key, '').strip()
    if not val:
        return list(default)
    return [item.strip() for item in val.split(',') if item.strip()]


SECRET_KEY = env_str('HEALTHTRACK_SECRET_KEY', 'django-insecure-healthtrack-development-key')

DEBUG = env_bool('HEALTHTRACK_DEBUG', True)

ALLOWED_HOSTS = env_list('HEALTHTRACK_ALLOWED_HOSTS', ['localhost', '127.0.0.1', 'testserver'])


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'corsheaders',
    'rest_framework',
    'django_filters',
    'clients',
    'programs',
    'portal',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'healthtrack.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'healthtrack.wsgi.application'


# Database

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': env_str('HEALTHTRACK_DATABASE_PATH', str(PROJECT_ROOT / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Internationalization

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'


# REST framework

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'EXCEPTION_HANDLER': 'healthtrack.exceptions.api_exception_handler',
    'UNAUTHENTICATED_USER': None,
}

CORS_ALLOWED_ORIGINS = env_list('HEALTHTRACK_CORS_ALLOWED_ORIGINS')
CORS_ALLOW_ALL_ORIGINS = not CORS_ALLOWED_ORIGINS
CORS_URLS_REGEX = r'^/api/.*$'


# API client used by the portal views

HEALTHTRACK_API_URL = env_str('HEALTHTRACK_API_URL', 'http://localhost:8000/api')
HEALTHTRACK_API_TIMEOUT = env_float('HEALTHTRACK_API_TIMEOUT', 10.0)


# Logging

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'loggers': {
        'healthtrack': {
            'handlers': ['console'],
            'level': env_str('HEALTHTRACK_LOG_LEVEL', 'INFO').upper(),
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
