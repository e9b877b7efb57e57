"""
Sequential, throttled verify-all driver.
"""

import time
from typing import Any, Callable, List, Optional

from work_history_verification.io.connectors.gateway import GatewayError
from work_history_verification.utils.logging import get_logger

from .exceptions import VerificationError
from .models import BatchSummary, WorkHistoryEntry

logger = get_logger(__name__)


class BatchOrchestrator:
    """
    Runs one combined verification per outstanding entry, one at a time.

    Entry N+1 starts only after entry N has completed (either way) and the
    inter-entry delay has elapsed. A failing entry is counted and the run
    continues.

    Args:
        run_entry: Verifies one entry; raises on failure.
        delay: Pause in seconds between two entries.
        sleep: Blocking sleep, injectable for tests.

    Example:
        >>> orchestrator = BatchOrchestrator(workflow.verify_entry, delay=1.0)
        >>> summary = orchestrator.verify_all(entries)
        >>> print(f"{summary.success_count}/{summary.total} verified")
    """

    def __init__(
        self,
        run_entry: Callable[[WorkHistoryEntry], Any],
        *,
        delay: float = 1.0,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.run_entry = run_entry
        self.delay = delay
        self.sleep = sleep or time.sleep

    @staticmethod
    def select_outstanding(
        entries: List[WorkHistoryEntry],
    ) -> List[WorkHistoryEntry]:
        """Entries whose company or employee is not verified yet."""
        return [entry for entry in entries if entry.needs_verification]

    def verify_all(self, entries: List[WorkHistoryEntry]) -> BatchSummary:
        outstanding = self.select_outstanding(entries)
        summary = BatchSummary(total=len(outstanding))

        if not outstanding:
            logger.info("batch_orchestrator.verify_all.nothing_outstanding")
            return summary

        logger.info(
            "batch_orchestrator.verify_all.started",
            total_entries=len(outstanding),
            skipped_entries=len(entries) - len(outstanding),
            delay=self.delay,
        )

        for idx, entry in enumerate(outstanding, 1):
            try:
                self.run_entry(entry)
                summary.success_count += 1
                logger.debug(
                    "batch_orchestrator.entry_verified",
                    entry_key=str(entry.key),
                    progress=f"{idx}/{len(outstanding)}",
                )

            except (VerificationError, GatewayError) as e:
                logger.warning(
                    "batch_orchestrator.entry_failed",
                    entry_key=str(entry.key),
                    error=e.message,
                )
                summary.failure_count += 1
                summary.errors.append(f"{entry.raw_company_name}: {e.message}")

            except Exception as e:
                logger.error(
                    "batch_orchestrator.unexpected_error",
                    entry_key=str(entry.key),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                summary.failure_count += 1
                summary.errors.append(
                    f"{entry.raw_company_name}: {type(e).__name__}: {e}"
                )

            # Rate limiting
            if self.delay > 0 and idx < len(outstanding):
                self.sleep(self.delay)

        logger.info(
            "batch_orchestrator.verify_all.completed",
            total=summary.total,
            success_count=summary.success_count,
            failure_count=summary.failure_count,
        )
        return summary
