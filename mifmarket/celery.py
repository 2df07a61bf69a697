import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mifmarket.settings")

app = Celery("mifmarket")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "sweep-orphaned-producer-accounts": {
        "task": "producers.tasks.sweep_orphaned_producer_accounts",
        "schedule": crontab(minute=15),
    },
}
