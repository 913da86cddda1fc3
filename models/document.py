"""
Document descriptor from the upload service.

The upload service owns documents; the kiosk reads the descriptor once at
the start of a print run and treats it as immutable for the whole run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict

from .print_request import ColorMode


@dataclass(frozen=True)
class Document:
    """
    An uploaded document ready to print.

    Attributes mirror the upload service's JSON keys.
    """

    filename: str
    """Original file name, shown on the printing screen."""

    pages: int
    """Source pages in the PDF."""

    copies: int
    """Copies requested by the customer."""

    npps: int
    """Source pages per physical sheet."""

    color: ColorMode
    """Requested color mode."""

    printed: int = 0
    """Physical pages already confirmed (resume point)."""

    @property
    def total_pages_in_batch(self) -> int:
        """Physical pages after N-up imposition."""
        return math.ceil(self.pages / self.npps)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """Create from the upload service's document.php response."""
        return cls(
            filename=str(data.get("filename", "")),
            pages=int(data.get("pages", 0)),
            copies=int(data.get("copies", 1)),
            npps=int(data.get("npps", 1)),
            color=ColorMode.parse(data.get("color")),
            printed=int(data.get("printed") or 0),
        )
