import json
import logging
import time
from contextlib import contextmanager

from celery import shared_task
from django.conf import settings
from django.utils import timezone
import redis

from .services.weekend import (
    check_weekend_penalties,
    notify_weekend_reminder,
    notify_weekend_start,
)

logger = logging.getLogger(__name__)

_redis_client = None


def _get_redis_client():
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(settings.ARENA_REDIS_URL)
    return _redis_client


def _task_key(kind: str, task_name: str) -> str:
    return f"{settings.TASK_KEY_PREFIX}:{kind}:{task_name}"


@contextmanager
def _sweep_lock(task_name: str):
    """
    Yields True when this worker owns the sweep, or when Redis cannot be
    reached at all.
    """
    key = _task_key("lock", task_name)
    token = f"{timezone.now().isoformat()}:{time.monotonic()}"
    try:
        acquired = bool(
            _get_redis_client().set(key, token, nx=True, ex=settings.SWEEP_LOCK_SECONDS)
        )
    except Exception:
        logger.exception("Could not take sweep lock %s; running unlocked.", key)
        yield True
        return

    try:
        yield acquired
    finally:
        if acquired:
            try:
                _get_redis_client().delete(key)
            except Exception:
                logger.exception("Could not release sweep lock %s", key)


def _record_health(task_name: str, summary: dict, started: float) -> None:
    data = {
        "task": task_name,
        "finished_at": timezone.now().isoformat(),
        "duration_ms": int((time.monotonic() - started) * 1000),
        "summary": summary or {},
    }
    try:
        _get_redis_client().set(
            _task_key("health", task_name),
            json.dumps(data, default=str),
            ex=settings.TASK_HEALTH_TTL_SECONDS,
        )
    except Exception:
        logger.exception("Could not record health for %s", task_name)


def _run_locked(task_name: str, func) -> dict:
    started = time.monotonic()
    with _sweep_lock(task_name) as owned:
        if not owned:
            logger.info("%s already running; skipping.", task_name)
            return {"status": "locked"}
        summary = func()
    _record_health(task_name, summary, started)
    return summary


@shared_task
def check_weekend_penalties_task() -> dict:
    """Monday settlement. Safe to deliver more than once."""
    return _run_locked("check_weekend_penalties", check_weekend_penalties)


@shared_task
def weekend_start_notifications() -> dict:
    return _run_locked("weekend_start_notifications", notify_weekend_start)


@shared_task
def weekend_reminder_notifications() -> dict:
    return _run_locked("weekend_reminder_notifications", notify_weekend_reminder)
