"""
Настройки Django для сервиса назначения ревьюверов.

Значения берутся из переменных окружения. Без DB_HOST используется локальный
SQLite-файл (разработка и тесты), иначе PostgreSQL.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_str(key: str, fallback: str) -> str:
    return os.environ.get(key) or fallback


def _env_int(key: str, fallback: int) -> int:
    try:
        return int(os.environ[key])
    except (KeyError, ValueError):
        return fallback


def _env_bool(key: str, fallback: bool) -> bool:
    value = os.environ.get(key)
    if not value:
        return fallback
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = _env_str('DJANGO_SECRET_KEY', 'insecure-dev-key-change-me')
DEBUG = _env_bool('DJANGO_DEBUG', False)
ALLOWED_HOSTS = [host.strip() for host in _env_str('DJANGO_ALLOWED_HOSTS', '*').split(',') if host.strip()]

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'api',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'reviewer_service.urls'
WSGI_APPLICATION = 'reviewer_service.wsgi.application'

if os.environ.get('DB_HOST'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'HOST': _env_str('DB_HOST', 'db'),
            'PORT': _env_int('DB_PORT', 5432),
            'USER': _env_str('DB_USER', 'app'),
            'PASSWORD': _env_str('DB_PASSWORD', 'app'),
            'NAME': _env_str('DB_NAME', 'pr_assignments'),
            'OPTIONS': {
                'sslmode': _env_str('DB_SSLMODE', 'disable'),
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': _env_str('SQLITE_PATH', str(BASE_DIR / 'db.sqlite3')),
            # in-memory sqlite игнорирует close(), тестам переподключения нужна база в файле
            'TEST': {
                'NAME': _env_str('SQLITE_TEST_PATH', str(BASE_DIR / 'test_db.sqlite3')),
            },
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

LOG_LEVEL = _env_str('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'loggers': {
        'pullrequester': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
