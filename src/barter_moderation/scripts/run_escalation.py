# src/barter_moderation/scripts/run_escalation.py
"""
Cron entry point for the report escalation sweep.

Runs one bounded sweep against the configured database and exits. Use this
when the in-process worker is disabled (ESCALATION_WORKER_ENABLED=false) and
an external scheduler drives escalation instead of POST /report-escalation.
"""

from __future__ import annotations

import asyncio
import logging

from barter_moderation.core.settings import settings
from barter_moderation.db.session import SessionLocal
from barter_moderation.services.escalation import SweepResult, run_escalation_sweep
from barter_moderation.services.notifier import get_notifier

logger = logging.getLogger(__name__)


async def sweep_once() -> SweepResult:
    notifier = get_notifier()
    try:
        with SessionLocal() as db:
            return await run_escalation_sweep(db, notifier=notifier)
    finally:
        await notifier.close()


def main() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    result = asyncio.run(sweep_once())
    print(
        f"Escalated {result.escalated_count} of {result.selected} overdue reports"
        f" ({len(result.failures)} remediation failures)"
    )


if __name__ == "__main__":
    main()
