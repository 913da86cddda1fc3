"""
Print job outcome models.

A PrintJobOutcome is returned by PrintService for every page-print call and
serialized as the JSON body of POST /api/print. It is not retained after the
response is sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class RejectionReason(Enum):
    """
    Why the admission gate turned a submission away.

    The value is the message shown to the customer.
    """

    BUSY = "Server is busy printing..."
    """Spooler has queued or active jobs (or the strict lock is held)."""

    NO_INK = "Printer has no inks. Please try again later"
    """Ink checking is enabled and no channel is usable."""

    NOT_ENOUGH_PAPER = "Not enough papers"
    """Paper count is below the sheets the rest of the batch needs."""


@dataclass(frozen=True)
class PrintJobOutcome:
    """
    Result of one page-print submission.
    """

    success: bool
    """Whether the page was spooled."""

    preview: Optional[str] = None
    """JPEG data URI of the printed page."""

    hash: Optional[str] = None
    """MD5 hex digest of the uploaded PDF bytes."""

    message: Optional[str] = None
    """Failure message for the customer."""

    reason: Optional[RejectionReason] = None
    """Set when the admission gate rejected the submission."""

    @classmethod
    def accepted(cls, content_hash: str, preview: str) -> "PrintJobOutcome":
        return cls(success=True, preview=preview, hash=content_hash)

    @classmethod
    def rejected(cls, reason: RejectionReason) -> "PrintJobOutcome":
        return cls(success=False, message=reason.value, reason=reason)

    @property
    def is_rejection(self) -> bool:
        return self.reason is not None

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON body for POST /api/print.

        Accepted: {success, hash, preview}; rejected: {success, message}.
        """
        if self.success:
            return {
                "success": True,
                "hash": self.hash,
                "preview": self.preview,
            }
        return {
            "success": False,
            "message": self.message,
        }
