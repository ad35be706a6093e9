from pathlib import Path

from celery.schedules import crontab
from decouple import config, Csv
from kombu import Queue
import dj_database_url

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Quick-start development settings - unsuitable for production
SECRET_KEY = config('SECRET_KEY', default='arena-dev-secret-key-change-me')

DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='', cast=Csv())

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Local
    'arena',
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

ROOT_URLCONF = 'arena_project.urls'

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

# Database
# Uses DATABASE_URL from .env
DATABASES = {
    'default': dj_database_url.config(
        default=config('DATABASE_URL', default='sqlite:///db.sqlite3')
    )
}

# Internationalization
LANGUAGE_CODE = 'en-us'
# Day boundaries (unlock days, streaks, weekend windows) are computed in the
# contest's own zone; this is the default for new contests.
CONTEST_TIME_ZONE = config('CONTEST_TIME_ZONE', default='Asia/Kolkata')
TIME_ZONE = CONTEST_TIME_ZONE
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

# Session/CSRF security
SESSION_COOKIE_HTTPONLY = True
if not DEBUG:
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {'format': '%(asctime)s %(levelname)s %(name)s: %(message)s'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'simple'},
    },
    'loggers': {
        'arena': {
            'handlers': ['console'],
            'level': config('ARENA_LOG_LEVEL', default='INFO'),
        },
    },
}

# Email (notifications are best-effort; the transport is configuration only)
EMAIL_BACKEND = config('EMAIL_BACKEND', default='django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = config('EMAIL_HOST', default='localhost')
EMAIL_PORT = config('EMAIL_PORT', default=587, cast=int)
EMAIL_HOST_USER = config('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = config('EMAIL_HOST_PASSWORD', default='')
EMAIL_USE_TLS = config('EMAIL_USE_TLS', default=True, cast=bool)
EMAIL_TIMEOUT = config('EMAIL_TIMEOUT', default=10, cast=int)
DEFAULT_FROM_EMAIL = config('DEFAULT_FROM_EMAIL', default='LeetCode Arena <no-reply@leetcode-arena.local>')
SITE_URL = config('SITE_URL', default='http://localhost:8000')

# Celery Configuration
CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = CONTEST_TIME_ZONE
CELERY_TASK_DEFAULT_QUEUE = 'celery'
CELERY_TASK_QUEUES = (
    Queue('celery'),
    Queue('notifications'),
)
CELERY_TASK_ROUTES = {
    'arena.tasks.weekend_start_notifications': {'queue': 'notifications'},
    'arena.tasks.weekend_reminder_notifications': {'queue': 'notifications'},
}
CELERY_BEAT_SCHEDULE = {
    'weekend-start-saturday': {
        'task': 'arena.tasks.weekend_start_notifications',
        'schedule': crontab(minute=0, hour=0, day_of_week='sat'),
    },
    'weekend-reminder-sunday-evening': {
        'task': 'arena.tasks.weekend_reminder_notifications',
        'schedule': crontab(minute=0, hour=18, day_of_week='sun'),
    },
    'weekend-penalties-monday': {
        'task': 'arena.tasks.check_weekend_penalties_task',
        'schedule': crontab(minute=30, hour=0, day_of_week='mon'),
    },
}

# External judge (LeetCode GraphQL)
LEETCODE_GRAPHQL_URL = config('LEETCODE_GRAPHQL_URL', default='https://leetcode.com/graphql')
LEETCODE_TIMEOUT_SECONDS = config('LEETCODE_TIMEOUT_SECONDS', default=10, cast=int)
LEETCODE_RECENT_AC_LIMIT = config('LEETCODE_RECENT_AC_LIMIT', default=20, cast=int)

# Scheduling rules
WEEKEND_PASS_THRESHOLD = config('WEEKEND_PASS_THRESHOLD', default=2, cast=int)
PENALTY_GUARD_DAYS = config('PENALTY_GUARD_DAYS', default=7, cast=int)
# "skip": participants with no weekend attempt are left untouched by the Monday sweep.
# "fail": no attempt counts as a failed weekend test.
WEEKEND_NO_ATTEMPT_POLICY = config('WEEKEND_NO_ATTEMPT_POLICY', default='skip')
SWEEP_LOCK_SECONDS = config('SWEEP_LOCK_SECONDS', default=600, cast=int)
# Sweep locks and health records live under "<TASK_KEY_PREFIX>:lock:<task>" and "<TASK_KEY_PREFIX>:health:<task>".
ARENA_REDIS_URL = config('ARENA_REDIS_URL', default=CELERY_BROKER_URL)
TASK_KEY_PREFIX = config('TASK_KEY_PREFIX', default='arena')
TASK_HEALTH_TTL_SECONDS = config('TASK_HEALTH_TTL_SECONDS', default=8 * 24 * 3600, cast=int)
PROBLEM_POINTS = {
    'Easy': config('POINTS_EASY', default=10, cast=int),
    'Medium': config('POINTS_MEDIUM', default=20, cast=int),
    'Hard': config('POINTS_HARD', default=40, cast=int),
}
