"""
ARQ background worker for the booking jobs.

Two cron jobs run here: delivery of due reminders and the automatic
confirmed -> completed transition once a session is over.
"""

import logging
import os
from urllib.parse import urlparse

from arq.connections import RedisSettings
from arq.cron import cron

from . import config
from . import models  # noqa: F401 - registers tables with Base
from .database import session_scope
from .domain.bookings.service import BookingService
from .services.notification_service import send_reminder

logger = logging.getLogger(__name__)


def get_redis_settings() -> RedisSettings:
    """Redis connection for the worker, from REDIS_URL or the REDIS_* parts"""
    if config.REDIS_URL:
        parsed = urlparse(config.REDIS_URL)
        host = parsed.hostname or "localhost"
        port = parsed.port or 6379
        password = parsed.password
        ssl = parsed.scheme == "rediss"
    else:
        host = config.REDIS_HOST
        port = config.REDIS_PORT
        password = config.REDIS_PASSWORD
        ssl = config.REDIS_SSL

    return RedisSettings(
        host=host, port=port, password=password, ssl=ssl, conn_timeout=15, conn_retry_delay=1
    )


async def send_due_reminders_task(ctx):
    """Send every pending reminder whose scheduled time has passed"""
    logger.info("⏰ Starting reminder run")
    try:
        with session_scope() as db:
            summary = await BookingService(db).send_due_reminders(send_reminder)
    except Exception as e:
        logger.error(f"❌ Reminder run failed: {str(e)}")
        raise

    logger.info(f"⏰ Reminder run complete: {summary}")
    return summary


async def status_automation_task(ctx):
    """Move confirmed bookings whose end time has passed to completed"""
    try:
        with session_scope() as db:
            return BookingService(db).complete_elapsed_bookings()
    except Exception as e:
        logger.error(f"❌ Status automation failed: {str(e)}")
        raise


class WorkerSettings:
    functions = [send_due_reminders_task, status_automation_task]
    redis_settings = get_redis_settings()

    max_jobs = int(os.getenv("ARQ_MAX_JOBS", "10"))
    job_timeout = int(os.getenv("ARQ_JOB_TIMEOUT", "300"))
    keep_result = int(os.getenv("ARQ_KEEP_RESULT", "3600"))
    max_tries = 3

    cron_jobs = [
        cron(send_due_reminders_task, minute={0, 15, 30, 45}),
        # twice an hour
        cron(status_automation_task, minute={5, 35}),
    ]
