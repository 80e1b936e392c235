import asyncio
import logging
import threading
import time
from typing import Any, Dict

from supplyvault.core.config import settings
from supplyvault.database.db import SessionLocal
from supplyvault.services.email_service import get_email_service
from supplyvault.services.expiry_alert_pipeline import run_expiry_check
from supplyvault.services.reverification_pipeline import run_reverification
from supplyvault.services.verification_router import get_verification_router


_started = False
_lock = threading.Lock()
logger = logging.getLogger(__name__)


async def _run_jobs() -> Dict[str, Any]:
    """
    Run both pipelines on one session. A job that fails is reported as
    `{"success": False, "error": ...}` and does not stop the other.
    """
    sender = get_email_service()
    summary: Dict[str, Any] = {}
    db = SessionLocal()
    try:
        jobs = (
            ("check_expiries", lambda: run_expiry_check(db, sender)),
            ("re_verify", lambda: run_reverification(db, get_verification_router(), sender)),
        )
        for name, job in jobs:
            try:
                results = await job()
            except Exception as exc:
                db.rollback()
                logger.exception("scheduled job failed", extra={"job": name})
                summary[name] = {"success": False, "error": str(exc) or "Unknown error"}
                continue
            summary[name] = results.model_dump(by_alias=True)
    finally:
        db.close()
    return summary


def run_jobs_once() -> Dict[str, Any]:
    return asyncio.run(_run_jobs())


def _loop(interval_seconds: int) -> None:
    while True:
        try:
            run_jobs_once()
        except Exception:
            logger.exception("scheduled pipeline run failed")
        time.sleep(interval_seconds)


def start_scheduler() -> bool:
    """
    Start the in-process scheduler thread when enabled. Returns True if a
    thread was started by this call.
    """
    global _started
    if not settings.SCHEDULER_ENABLED:
        return False
    with _lock:
        if _started:
            return False
        interval = max(60, int(settings.SCHEDULER_INTERVAL_SECONDS))
        thread = threading.Thread(target=_loop, args=(interval,), daemon=True, name="supplyvault-scheduler")
        thread.start()
        _started = True
    logger.info("scheduler started", extra={"interval_seconds": interval})
    return True
