"""
Celery configuration for the finance service.

Celery runs the work that must not happen inside a request:
- The periodic recurrence sweep (scheduled through django-celery-beat)
- Push notification delivery after financial changes commit

Tasks are auto-discovered from every installed Django app's tasks.py.

Usage:
    from finance.tasks import process_due_recurrences

    process_due_recurrences.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
