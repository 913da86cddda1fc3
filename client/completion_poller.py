"""
Waits for the printer to go idle after a page was spooled.

Two parties race for each page:
    Poll thread   - every interval, GET /api/print until printing is false
    Caller thread - waits on the poll thread's completion for the timeout

Whichever finishes first wins. When the timeout wins the caller sets the
cancel event, so the poll thread stops at its next wake-up without issuing
another query, and PrintTimeoutError is raised.

A status request already in flight when the timeout fires is not
interrupted: the daemon poll thread lives until that request returns (at
most the HTTP client timeout), then exits without touching any state.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from core.exceptions import PrintTimeoutError


class CompletionPoller:
    """
    Polls the backend until the spooler queue drains.

    Attributes:
        interval_seconds: Delay before each status query
        timeout_seconds: Per-page limit before giving up
    """

    def __init__(
        self,
        backend,
        interval_seconds: float = 1.0,
        timeout_seconds: float = 90.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._backend = backend
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("printu_kiosk.client.poller")

    def wait_until_idle(self, page: int) -> int:
        """
        Block until the printer is idle.

        Args:
            page: Page being printed (for logs and the timeout error)

        Returns:
            Number of status queries made

        Raises:
            PrintTimeoutError: If the printer is still busy after the timeout
            BackendError: If a status query fails
        """
        done = threading.Event()
        cancel = threading.Event()
        errors: List[BaseException] = []
        polls = [0]

        def poll_loop():
            try:
                while not cancel.wait(self.interval_seconds):
                    polls[0] += 1
                    if not self._backend.is_printing():
                        return
            except Exception as e:
                # Re-raised on the waiting thread
                errors.append(e)
            finally:
                done.set()

        thread = threading.Thread(target=poll_loop, name=f"Poll-{page}", daemon=True)
        thread.start()

        if not done.wait(self.timeout_seconds):
            cancel.set()
            thread.join(self.interval_seconds)
            self._logger.warning(
                f"Page {page}: printer still busy after {self.timeout_seconds:.0f}s "
                f"({polls[0]} polls)"
            )
            raise PrintTimeoutError(page, self.timeout_seconds)

        thread.join()
        if errors:
            raise errors[0]

        self._logger.info(f"Page {page}: printer idle after {polls[0]} polls")
        return polls[0]
