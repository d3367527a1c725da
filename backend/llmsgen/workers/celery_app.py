"""Celery application configuration."""

import logging

from celery import Celery
from celery.schedules import schedule
from celery.signals import setup_logging

from llmsgen.config import get_settings
from llmsgen.log_config import configure_logging

settings = get_settings()


@setup_logging.connect
def configure_worker_logging(**kwargs):
    handler = configure_logging()

    # Configure Celery logger
    celery_logger = logging.getLogger("celery")
    celery_logger.handlers.clear()
    celery_logger.addHandler(handler)
    celery_logger.setLevel(logging.INFO)
    celery_logger.propagate = False


celery_app = Celery(
    "llmsgen",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["llmsgen.workers.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_hijack_root_logger=False,  # Don't hijack root logger (we configure it ourselves)
    # Result backend
    result_expires=3600,  # 1 hour
    # Beat schedule for the expiry sweep
    beat_schedule={
        "sweep-expired-runs": {
            "task": "llmsgen.workers.tasks.sweep_expired_runs",
            "schedule": schedule(run_every=settings.sweep_interval_minutes * 60),
        },
    },
)
