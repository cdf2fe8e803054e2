"""
Add celery-beat schedule for the recurring transaction sweep.

Runs finance.tasks.process_due_recurrences once a day shortly after
midnight UTC. The sweep is idempotent per definition and due date, so an
extra manual run (or the cron endpoint) is harmless.
"""

from django.db import migrations

TASK_NAME = "Finance: Process Due Recurrences"


def create_periodic_task(apps, schema_editor):
    """Create the daily periodic task for the recurrence sweep."""
    CrontabSchedule = apps.get_model("django_celery_beat", "CrontabSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    # Daily at 00:05 UTC
    schedule, _ = CrontabSchedule.objects.get_or_create(
        minute="5",
        hour="0",
        day_of_week="*",
        day_of_month="*",
        month_of_year="*",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "finance.tasks.process_due_recurrences",
            "crontab": schedule,
            "enabled": True,
            "description": (
                "Materializes every active recurring transaction whose next "
                "due date has arrived and advances its schedule."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("finance", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
