"""Background scheduler for the daily balance reconciliation."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..core.database import Database
from ..services.ledger_service import reconcile_balances

logger = logging.getLogger(__name__)

JOB_ID = "balance_reconciliation"


def _execute_reconciliation(database: Database) -> dict[str, int]:
    session = database.session_factory()
    try:
        summary = reconcile_balances(session, repair=True)
        session.commit()
        logger.info("balance reconciliation completed: %s", summary)
        return summary
    except Exception:  # pragma: no cover - safeguard for background job
        session.rollback()
        logger.exception("balance reconciliation job failed")
        raise
    finally:
        session.close()


def build_scheduler(database: Database, *, hour: int) -> AsyncIOScheduler:
    """Create the (not yet started) scheduler with the daily reconciliation job."""

    scheduler = AsyncIOScheduler(timezone="UTC")

    async def _scheduled_job() -> None:
        _execute_reconciliation(database)

    scheduler.add_job(
        _scheduled_job,
        "cron",
        hour=hour,
        minute=0,
        id=JOB_ID,
        misfire_grace_time=3600,
        replace_existing=True,
    )
    return scheduler


def run_reconciliation_once(database: Database) -> dict[str, int]:
    """Convenience helper to run the reconciliation synchronously for manual use."""

    return _execute_reconciliation(database)
