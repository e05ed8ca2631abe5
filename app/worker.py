"""
Celery worker entry point
Delivers WhatsApp notifications and runs the reminder sweep (beat embedded)
"""
import logging
from celery.signals import worker_process_init, worker_ready, worker_shutdown

from app.config.celery_config import celery_app
from app.config.database import engine
from app.config.settings import get_settings
from app.utils.my_logging import setup_logging
import app.tasks.notification_tasks  # noqa: F401  registers the tasks

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()


@worker_process_init.connect
def reset_db_pool(**kwargs):
    """Forked children must not reuse the parent's pooled connections"""
    engine.dispose(close=False)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    booking_tasks = sorted(name for name in celery_app.tasks.keys() if name.startswith("app."))
    logger.info(f"🚀 Celery worker ready, tasks: {booking_tasks}")
    logger.info(f"⏰ Reminder sweep every {settings.REMINDER_SWEEP_SECONDS}s")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("🛑 Celery worker shutting down...")


if __name__ == "__main__":
    celery_app.start([
        'worker',
        '--beat',
        '--loglevel=info',
        '--queues=notifications',
        '--concurrency=4',
        '--max-tasks-per-child=1000'
    ])
