"""
Configuration Django de Pexry
Les valeurs sensibles et les paramètres d'intégration sont lus depuis l'environnement
"""
import os
from decimal import Decimal
from pathlib import Path


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-pexry-dev-key-change-me')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'accounts.apps.AccountsConfig',
    'tenants.apps.TenantsConfig',
    'products.apps.ProductsConfig',
    'orders.apps.OrdersConfig',
    'payments.apps.PaymentsConfig',
    'notifications.apps.NotificationsConfig',
    'disputes.apps.DisputesConfig',
    'conversations.apps.ConversationsConfig',
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

ROOT_URLCONF = 'project.urls'

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

WSGI_APPLICATION = 'project.wsgi.application'


# Base de données
# SQLite par défaut, PostgreSQL si PEXRY_DB_ENGINE=postgresql
PEXRY_DB_TIMEOUT = int(os.environ.get('PEXRY_DB_TIMEOUT', '20'))

if os.environ.get('PEXRY_DB_ENGINE', 'sqlite') == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ.get('PEXRY_DB_NAME', 'pexry'),
            'USER': os.environ.get('PEXRY_DB_USER', 'pexry'),
            'PASSWORD': os.environ.get('PEXRY_DB_PASSWORD', ''),
            'HOST': os.environ.get('PEXRY_DB_HOST', 'localhost'),
            'PORT': os.environ.get('PEXRY_DB_PORT', '5432'),
            'OPTIONS': {
                'connect_timeout': PEXRY_DB_TIMEOUT,
                'options': f'-c statement_timeout={PEXRY_DB_TIMEOUT * 1000}',
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.environ.get('PEXRY_DB_NAME', str(BASE_DIR / 'db.sqlite3')),
            'OPTIONS': {
                'timeout': PEXRY_DB_TIMEOUT,
            },
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'static_root'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'


# Email
EMAIL_BACKEND = os.environ.get('DJANGO_EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = os.environ.get('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.environ.get('EMAIL_PORT', '25'))
EMAIL_HOST_USER = os.environ.get('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.environ.get('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_TLS = env_bool('EMAIL_USE_TLS', False)
DEFAULT_FROM_EMAIL = os.environ.get('DEFAULT_FROM_EMAIL', 'Pexry <no-reply@pexry.com>')


# NOWPayments
NOWPAYMENTS_API_KEY = os.environ.get('NOWPAYMENTS_API_KEY', '')
NOWPAYMENTS_IPN_SECRET = os.environ.get('NOWPAYMENTS_IPN_SECRET', '')
NOWPAYMENTS_BASE_URL = os.environ.get('NOWPAYMENTS_BASE_URL', 'https://api.nowpayments.io')
NOWPAYMENTS_BYPASS_API = env_bool('NOWPAYMENTS_BYPASS_API', False)  # Mode test : pas d'appel réseau
NOWPAYMENTS_TIMEOUT = float(os.environ.get('NOWPAYMENTS_TIMEOUT', '30'))
NOWPAYMENTS_CURRENCY = os.environ.get('NOWPAYMENTS_CURRENCY', 'usd')


# Marketplace
PEXRY_PUBLIC_URL = os.environ.get('PEXRY_PUBLIC_URL', 'http://localhost:8000')
PEXRY_SELLER_SHARE = Decimal(os.environ.get('PEXRY_SELLER_SHARE', '0.90'))
PEXRY_PENDING_ORDER_TTL_HOURS = int(os.environ.get('PEXRY_PENDING_ORDER_TTL_HOURS', '24'))
PEXRY_MIN_WITHDRAWAL = Decimal(os.environ.get('PEXRY_MIN_WITHDRAWAL', '10.00'))
# 'forward' : open -> in-progress -> resolved -> closed, sans retour en arrière
# 'free' : toute transition est acceptée
PEXRY_DISPUTE_TRANSITIONS = os.environ.get('PEXRY_DISPUTE_TRANSITIONS', 'forward')


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.environ.get('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        **{
            app: {'handlers': ['console'], 'level': os.environ.get('PEXRY_LOG_LEVEL', 'INFO'), 'propagate': False}
            for app in (
                'accounts', 'tenants', 'products', 'orders', 'payments',
                'notifications', 'disputes', 'conversations', 'project',
            )
        },
    },
}
