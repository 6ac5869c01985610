"""Celery background tasks.

Used when the auto-checkout sweep is scheduled by Celery beat instead of the
in-process asyncio loop (``AUTO_CHECKOUT_SCHEDULER=celery``).
"""

import asyncio
import logging

from celery import shared_task

from app.core.background_tasks import run_isolated_auto_checkout_sweep

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


# ==================== BOOKING TASKS ====================


@shared_task
def auto_checkout_overdue_stays():
    """Complete in-house bookings whose check-out deadline has passed.

    Not retried: a booking that failed stays in the sweep's query and is
    picked up again on the next beat.
    """
    try:
        completed = run_async(run_isolated_auto_checkout_sweep())
    except Exception as exc:
        logger.error(f"Auto-checkout task failed: {exc}")
        return {"status": "error", "message": str(exc)}
    return {"status": "success", "completed": completed}
