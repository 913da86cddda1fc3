"""
Page orchestrator: drives one logical document through the backend.

State machine:
    IDLE -> GATHERING -> PRINTING(page N) -> POLLING(page N)
         -> ADVANCING (next page) | TIMED_OUT | FAILED
         -> DONE | REDIRECTING

One run is strictly sequential: a page's submit -> poll -> confirm cycle
finishes before the next page is built. Any failure ends the run; there are
no retries. The upload service's printed count is the resume point, so a
re-initiated run continues after the last confirmed page.

Usage:
    orchestrator = PageOrchestrator(upload, backend, poller, navigate=print)
    result = orchestrator.run("abc123")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
from urllib.parse import urlencode

from core.exceptions import BackendError, ConfirmationError, KioskError, PrintTimeoutError
from models.document import Document
from models.print_request import PrintRequest


class OrchestratorState(Enum):
    IDLE = "idle"
    GATHERING = "gathering"
    PRINTING = "printing"
    POLLING = "polling"
    ADVANCING = "advancing"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    DONE = "done"
    REDIRECTING = "redirecting"


@dataclass(frozen=True)
class PrintRunState:
    """Snapshot published to listeners on every transition."""

    state: OrchestratorState
    page: int = 0
    preview: str = ""
    error: str = ""

    @property
    def page_label(self) -> str:
        """Page number as shown on the kiosk screen (6 digits)."""
        return str(self.page).zfill(6)


@dataclass(frozen=True)
class PrintRunResult:
    success: bool
    pages_printed: int
    message: str = ""


Listener = Callable[[PrintRunState], None]


class PageOrchestrator:
    """
    Prints every remaining page of an uploaded document.

    Attributes:
        state: Latest published PrintRunState
    """

    def __init__(
        self,
        upload_client,
        backend_client,
        poller,
        navigate: Callable[[str], None],
        listeners: Optional[List[Listener]] = None,
        redirect_delay_seconds: float = 2.5,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self._upload = upload_client
        self._backend = backend_client
        self._poller = poller
        self._navigate = navigate
        self._listeners: List[Listener] = list(listeners or [])
        self.redirect_delay_seconds = redirect_delay_seconds
        self._sleep = sleep
        self._logger = logger or logging.getLogger("printu_kiosk.client.orchestrator")
        self.state = PrintRunState(OrchestratorState.IDLE)
        self._pages_done = 0

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _publish(self, state: OrchestratorState, page: int = 0, preview: str = "", error: str = "") -> None:
        self.state = PrintRunState(state, page=page, preview=preview, error=error)
        self._logger.debug(f"State -> {state.value} (page={page})")
        for listener in self._listeners:
            listener(self.state)

    # ---------- Run ----------

    def run(self, upload_id: str) -> PrintRunResult:
        """
        Print the document end to end.

        Never raises for run failures; they are published, logged, followed
        by a redirect to "/" and reported in the result.
        """
        if not upload_id:
            self._navigate("/")
            return PrintRunResult(success=False, pages_printed=0, message="Missing upload id")

        self._publish(OrchestratorState.GATHERING)
        self._pages_done = 0
        try:
            document = self._upload.get_document(upload_id)
            pdf_bytes = self._upload.get_pdf(upload_id)
            printed = self._print_pages(upload_id, document, pdf_bytes)
        except KioskError as e:
            return self._fail(e, printed_so_far=self._pages_done)

        self._publish(OrchestratorState.DONE)
        query = urlencode({"filename": document.filename, "upload": upload_id})
        self._navigate(f"/success?{query}")
        self._logger.info(f"Upload {upload_id}: all pages printed ({printed} this run)")
        return PrintRunResult(success=True, pages_printed=printed)

    def _print_pages(self, upload_id: str, document: Document, pdf_bytes: bytes) -> int:
        total_pages = document.total_pages_in_batch

        for i in range(document.printed, total_pages):
            page = i + 1
            request = PrintRequest(
                page=page,
                total_pages_in_batch=total_pages,
                sheets_remaining_in_batch=(total_pages - i) * document.copies,
                npps=document.npps,
                color_mode=document.color,
                copies=document.copies,
                pdf_bytes=pdf_bytes,
            )

            self._publish(OrchestratorState.PRINTING, page=page)
            outcome = self._backend.submit_page(request)

            self._publish(OrchestratorState.POLLING, page=page, preview=outcome.preview or "")
            try:
                self._poller.wait_until_idle(page)
            except PrintTimeoutError as e:
                self._publish(OrchestratorState.TIMED_OUT, page=page, error=str(e))
                try:
                    self._backend.cancel_all()
                except BackendError as cancel_error:
                    self._logger.error(f"Could not cancel queued jobs after timeout: {cancel_error}")
                raise

            try:
                self._upload.confirm_page(upload_id, page, outcome.hash)
            except ConfirmationError:
                self._logger.error(
                    f"Page {page} printed but unconfirmed (hash={outcome.hash}); "
                    f"a new run will print it again"
                )
                raise

            self._pages_done += 1
            self._publish(OrchestratorState.ADVANCING, page=page)

        return self._pages_done

    def _fail(self, error: KioskError, printed_so_far: int) -> PrintRunResult:
        message = error.message
        self._logger.error(f"Print run failed: {error}")
        if self.state.state != OrchestratorState.TIMED_OUT:
            self._publish(OrchestratorState.FAILED, page=self.state.page, error=message)
        self._publish(OrchestratorState.REDIRECTING, page=self.state.page, error=message)
        self._sleep(self.redirect_delay_seconds)
        self._navigate("/")
        return PrintRunResult(success=False, pages_printed=printed_so_far, message=message)
