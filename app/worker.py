"""Celery worker configuration.

Only needed when the auto-checkout sweep runs under Celery beat
(``AUTO_CHECKOUT_SCHEDULER=celery``); the default deployment runs the sweep
inside the API process.
"""

from celery import Celery

from app.config import settings

# Create Celery app
celery_app = Celery(
    "ortus_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.hotel_timezone,
    enable_utc=True,

    # One sweep at a time
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
    task_time_limit=max(settings.auto_checkout_interval_seconds - 10, 10),

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Beat schedule for periodic tasks
    beat_schedule={
        "auto-checkout-overdue-stays": {
            "task": "app.tasks.auto_checkout_overdue_stays",
            "schedule": float(settings.auto_checkout_interval_seconds),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
