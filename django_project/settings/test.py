from django_project.settings import *  # noqa

SECRET_KEY = 'test-secret'
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

SUBDOMAINS_BASE_DOMAIN = 'seeky.click'
SUBDOMAINS_CLOUDFLARE_API_TOKEN = 'test-token'
SUBDOMAINS_CLOUDFLARE_ZONE_ID = 'test-zone'
SUBDOMAINS_PROVIDER_TIMEOUT = 2

REST_FRAMEWORK.update({  # noqa: F405
    'DEFAULT_RENDERER_CLASSES': ('rest_framework.renderers.JSONRenderer',)
})

LOGGING['loggers']['subdomains']['level'] = 'WARN'  # noqa: F405
