"""
Consumables tracking: printer idle state, ink levels and paper count.

The tracker owns the process-wide ConsumablesState (paper estimate and the
ink notification signature). Flask handles requests on worker threads, so
every mutation happens under one lock.

Notification rules:
    - Paper: every successful spool that leaves paper_count <= threshold
      sends "No papers". No suppression.
    - Ink: a notification is sent when the depleted-channel condition differs
      from the last one notified (hysteresis). The same condition checked
      twice notifies once; a changed condition notifies once more. When all
      channels recover the signature is cleared.

Usage:
    tracker = ConsumablesTracker(spooler, notifier, ConsumablesState(paper_count=50))

    if tracker.is_printer_idle() and tracker.check_ink_levels():
        ...
        tracker.account_for_job(copies=2)
"""

from __future__ import annotations

import threading
from typing import Protocol

from core.spooler import CupsSpooler
from models.consumables import ConsumablesState, InkReport
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


NO_PAPER_MESSAGE = "No papers"
NO_INK_MESSAGE = "Printer has no ink"


class Notifier(Protocol):
    def notify(self, text: str): ...


class ConsumablesTracker:
    """
    In-memory paper counter and ink sampler.

    Attributes:
        low_paper_threshold: Paper count at or below which to notify
    """

    def __init__(
        self,
        spooler: CupsSpooler,
        notifier: Notifier,
        state: ConsumablesState,
        low_paper_threshold: int = 10,
    ):
        self._spooler = spooler
        self._notifier = notifier
        self._state = state
        self.low_paper_threshold = low_paper_threshold
        self._lock = threading.Lock()

        logger.info(
            f"ConsumablesTracker initialized (papers={state.paper_count}, "
            f"low threshold={low_paper_threshold})"
        )

    @property
    def paper_count(self) -> int:
        with self._lock:
            return self._state.paper_count

    def snapshot(self) -> ConsumablesState:
        """Copy of the current state."""
        with self._lock:
            return ConsumablesState(
                paper_count=self._state.paper_count,
                last_ink_notification_key=self._state.last_ink_notification_key,
            )

    def is_printer_idle(self) -> bool:
        """
        True when the spooler has no queued or active job.

        Raises:
            SpoolerQueryError: If the queue status cannot be read
        """
        return not self._spooler.is_busy()

    def check_ink_levels(self) -> bool:
        """
        Sample the ink tool and notify on a changed depletion condition.

        Returns:
            True iff at least one channel is above 10%

        Raises:
            SpoolerQueryError: If the ink tool cannot run
        """
        report = InkReport.parse(self._spooler.ink_report())
        key = report.notification_key

        with self._lock:
            if not key:
                self._state.last_ink_notification_key = ""
                return True
            if key == self._state.last_ink_notification_key:
                return report.has_ink
            self._state.last_ink_notification_key = key

        depleted = report.depleted
        if depleted:
            text = f"{', '.join(depleted)} ink(s) is below 10%!"
        else:
            text = NO_INK_MESSAGE

        logger.warning(f"Ink condition changed: {key}")
        self._notifier.notify(text)
        return report.has_ink

    def account_for_job(self, copies: int) -> int:
        """
        Deduct `copies` sheets after a successful spool.

        Returns:
            The new paper count
        """
        with self._lock:
            self._state.paper_count -= copies
            remaining = self._state.paper_count

        logger.info(f"Paper count now {remaining}")

        if remaining <= self.low_paper_threshold:
            logger.warning(f"Paper low ({remaining} <= {self.low_paper_threshold})")
            self._notifier.notify(NO_PAPER_MESSAGE)

        return remaining
