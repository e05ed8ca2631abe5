# app/config/celery_config.py
"""Celery configuration, task routing and the reminder beat schedule"""
from celery import Celery
from kombu import Queue

from app.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure Celery application"""

    celery_app = Celery(
        "booking_service",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
    )

    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,

        # Task routing
        task_routes={
            "app.tasks.notification_tasks.*": {"queue": "notifications"},
        },

        task_queues=(
            Queue("notifications", routing_key="notifications"),
        ),

        # Periodic due-reminder sweep
        beat_schedule={
            "process-due-reminders": {
                "task": "app.tasks.notification_tasks.process_due_reminders",
                "schedule": float(settings.REMINDER_SWEEP_SECONDS),
            },
        },

        # Worker settings
        worker_max_tasks_per_child=1000,
        worker_prefetch_multiplier=1,
        task_acks_late=True,

        broker_connection_retry_on_startup=True,
    )

    celery_app.autodiscover_tasks(["app.tasks"], related_name="notification_tasks")

    return celery_app


# Create the Celery app instance
celery_app = create_celery_app()
