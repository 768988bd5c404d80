import os

import celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "django_project.settings")


app = celery.Celery(__name__)
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
