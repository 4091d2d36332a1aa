import os

from celery import Celery
from celery.schedules import crontab

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shop_project.settings")

# name should match the project package
celery_app = Celery("shop_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks from installed apps (billing_core/tasks.py)
celery_app.autodiscover_tasks()

# nightly reconciliation of every bill, after the shop closes
celery_app.conf.beat_schedule = {
    "audit-bill-ledgers-nightly": {
        "task": "billing_core.tasks.audit_bill_ledgers",
        "schedule": crontab(hour=23, minute=30),
    },
}
