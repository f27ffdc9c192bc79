"""
Status Automation Background Worker
Applies due schedule holiday transitions at startup and then every minute
"""

import asyncio
import logging
from typing import Optional

import redis
from redis.exceptions import LockNotOwnedError
from redis.lock import Lock

from .config import (
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_SSL,
    REDIS_URL,
    STATUS_SCAN_INTERVAL,
    STATUS_SCAN_LOCK_KEY,
    STATUS_SCAN_LOCK_TTL,
)
from .database import SessionLocal
from .services.status_automation import update_schedule_statuses

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get or create the Redis client that holds the scan lock"""
    global redis_client

    if redis_client is None:
        if REDIS_URL:
            redis_client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
            )
        else:
            redis_client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                ssl=REDIS_SSL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
            )
        logger.info("✅ Redis client initialized for status scan lock")

    return redis_client


def acquire_scan_lock(client: redis.Redis) -> tuple[bool, Optional[Lock]]:
    """
    Take the scan lock unless another scan holds it.
    If Redis is unreachable the scan runs unlocked (fail-open).

    Returns:
        (should_scan, lock) - lock is None when the scan runs unlocked
    """
    try:
        lock = client.lock(STATUS_SCAN_LOCK_KEY, timeout=STATUS_SCAN_LOCK_TTL, blocking=False)
        if lock.acquire():
            return True, lock
        return False, None
    except redis.RedisError as e:
        logger.warning(f"⚠️ Scan lock unavailable, scanning without it: {str(e)}")
        return True, None


def release_scan_lock(lock: Lock) -> None:
    """Release the lock only while this scan still owns it"""
    try:
        lock.release()
    except LockNotOwnedError:
        logger.warning("⚠️ Scan lock expired mid-scan and is now held by another scan, leaving it in place")
    except redis.RedisError as e:
        logger.warning(f"⚠️ Failed to release scan lock (expires in {STATUS_SCAN_LOCK_TTL}s): {str(e)}")


def run_status_scan(client: redis.Redis) -> Optional[dict]:
    """
    One worker tick.
    - Schedules: holiday → active (after the holiday end date has passed)
    - Schedules: active → holiday (when a staged holiday start date arrives)

    Returns:
        The scan summary, or None when a previous scan still holds the lock
    """
    should_scan, lock = acquire_scan_lock(client)
    if not should_scan:
        logger.info("⏭️ Status scan skipped: previous scan still running")
        return None

    db = SessionLocal()
    try:
        summary = update_schedule_statuses(db)
        logger.info(f"Status automation complete: {summary}")
        return summary
    except Exception as e:
        logger.error(f"❌ Status automation failed: {str(e)}")
        raise
    finally:
        db.close()
        if lock is not None:
            release_scan_lock(lock)


async def run_status_worker(client: Optional[redis.Redis] = None):
    """
    Main worker loop - scans at startup, then every STATUS_SCAN_INTERVAL seconds
    """
    logger.info("🚀 Starting status automation worker...")
    client = client or get_redis_client()

    while True:
        try:
            run_status_scan(client)
            await asyncio.sleep(STATUS_SCAN_INTERVAL)

        except Exception as e:
            logger.error(f"❌ Error in status worker loop: {e}")
            await asyncio.sleep(STATUS_SCAN_INTERVAL)
