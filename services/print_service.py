"""
Print submission service: admission gate and dispatcher.

Each POST /api/print runs through PrintService.submit() on its own Flask
worker thread:

    1. Admission gate
       - printer busy            -> "Server is busy printing..."
       - ink check enabled, none -> "Printer has no inks. Please try again later"
       - paper < sheets needed   -> "Not enough papers"
    2. Transform chain (grayscale, imposition, preview)
    3. Spool the single requested page
    4. Account for paper, hash the uploaded bytes, return the outcome

Rejections are PrintJobOutcome values. Command failures (SpoolerQueryError,
TransformError, SpoolSubmissionError) propagate to the route's error handler.

Mutual exclusion:
    By default admission is advisory: it trusts the live spooler state, and two
    submissions racing between the idle check and `lp` can both pass. With
    strict_single_flight=True an in-process lock is taken (non-blocking) before
    the idle query and held through spool submission; a held lock rejects as
    busy.

Usage:
    service = PrintService(tracker, transform_chain, spooler, check_inks=True)
    outcome = service.submit(request)
    return jsonify(outcome.to_dict())
"""

from __future__ import annotations

import hashlib
import threading
from typing import Any, Dict, Optional

from core.spooler import CupsSpooler
from models.job_result import PrintJobOutcome, RejectionReason
from models.print_request import PrintRequest
from modules.transform_chain import DocumentTransformChain
from services.consumables_service import ConsumablesTracker
from logging_config import get_logger, get_job_logger


# Module logger
logger = get_logger(__name__)


def content_hash(data: bytes) -> str:
    """MD5 hex digest the upload service uses to confirm a page."""
    return hashlib.md5(data).hexdigest()


class PrintService:
    """
    Admits, transforms and spools page-print requests.

    Attributes:
        check_inks: Whether admission samples the ink tool
        strict_single_flight: Whether an in-process lock guards admission + spool
    """

    def __init__(
        self,
        tracker: ConsumablesTracker,
        transform_chain: DocumentTransformChain,
        spooler: CupsSpooler,
        check_inks: bool = False,
        strict_single_flight: bool = False,
    ):
        self._tracker = tracker
        self._chain = transform_chain
        self._spooler = spooler
        self.check_inks = check_inks
        self.strict_single_flight = strict_single_flight
        self._single_flight = threading.Lock()

        logger.info(
            f"PrintService initialized (check_inks={check_inks}, "
            f"strict_single_flight={strict_single_flight})"
        )

    # ---------- Status / cancellation ----------

    def status(self) -> Dict[str, Any]:
        """Body for GET /api/print."""
        return {
            "success": True,
            "printing": not self._tracker.is_printer_idle(),
        }

    def cancel_all(self) -> None:
        """Flush the whole physical queue (client timeout path)."""
        self._spooler.cancel_all()

    # ---------- Admission gate ----------

    def admit(self, request: PrintRequest) -> Optional[PrintJobOutcome]:
        """
        Run the admission checks.

        Returns:
            A rejected outcome, or None when the request may proceed

        Raises:
            SpoolerQueryError: If printer or ink state cannot be read
        """
        if not self._tracker.is_printer_idle():
            return PrintJobOutcome.rejected(RejectionReason.BUSY)

        if self.check_inks and not self._tracker.check_ink_levels():
            return PrintJobOutcome.rejected(RejectionReason.NO_INK)

        if self._tracker.paper_count < request.sheets_remaining_in_batch:
            return PrintJobOutcome.rejected(RejectionReason.NOT_ENOUGH_PAPER)

        return None

    # ---------- Dispatcher ----------

    def submit(self, request: PrintRequest) -> PrintJobOutcome:
        """
        Admit, transform and spool one page.

        Raises:
            SpoolerQueryError: If printer or ink state cannot be read
            TransformError: If a transform stage fails
            SpoolSubmissionError: If lp refuses the artifact
        """
        if not self.strict_single_flight:
            return self._admit_and_print(request)

        if not self._single_flight.acquire(blocking=False):
            logger.info(f"Rejected page {request.page}: another submission holds the print lock")
            return PrintJobOutcome.rejected(RejectionReason.BUSY)
        try:
            return self._admit_and_print(request)
        finally:
            self._single_flight.release()

    def _admit_and_print(self, request: PrintRequest) -> PrintJobOutcome:
        rejection = self.admit(request)
        if rejection is not None:
            logger.info(f"Rejected page {request.page}: {rejection.message}")
            return rejection

        with self._chain.prepare(request) as artifact:
            job_logger = get_job_logger(artifact.token)
            self._spooler.submit(artifact.path, page=request.page, copies=request.copies)
            preview = artifact.preview_uri

        self._tracker.account_for_job(request.copies)
        digest = content_hash(request.pdf_bytes)
        job_logger.info(f"Page {request.page}/{request.total_pages_in_batch} spooled, hash={digest}")

        return PrintJobOutcome.accepted(content_hash=digest, preview=preview)
