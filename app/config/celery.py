"""
Celery configuration for the commission payments backend.

Celery delivers notifications in the background. Payment reconciliation and
escrow release run synchronously inside the triggering request and never
depend on a worker being available.

Usage:
    from celery import shared_task

    @shared_task
    def deliver_notification(user_id, event_type, payload):
        ...

    deliver_notification.delay(user.id, "commission_accepted", {...})
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Looks for a tasks.py module in each installed app
app.autodiscover_tasks()
