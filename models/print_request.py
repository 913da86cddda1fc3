"""
Print request data models.

A PrintRequest describes ONE physical page-print submission: which page of
the (possibly imposed) document to print, how many copies, and how the
source PDF must be transformed first.

The kiosk client builds one per page; the backend rebuilds it from the
multipart form with PrintRequest.from_form().

Thread Safety:
    - PrintRequest is frozen (immutable) and safe to hand to any thread
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping

from core.exceptions import InvalidPrintRequestError


SUPPORTED_NPPS = (1, 2, 4, 6, 9)
"""Pages-per-sheet values the imposition stage knows how to lay out."""


class ColorMode(Enum):
    """
    Color handling for a print run.

    Wire format: "BW" selects black and white; anything else prints in color.
    """

    COLOR = "Color"
    BLACK_AND_WHITE = "BW"

    @classmethod
    def parse(cls, value: str | None) -> "ColorMode":
        if value in ("BW", "BlackAndWhite"):
            return cls.BLACK_AND_WHITE
        return cls.COLOR


def _parse_int(form: Mapping[str, Any], name: str, minimum: int) -> int:
    raw = form.get(name)
    if raw is None or str(raw).strip() == "":
        raise InvalidPrintRequestError(f"Missing field '{name}'", field=name)
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise InvalidPrintRequestError(f"Field '{name}' must be an integer (got {raw!r})", field=name)
    if value < minimum:
        raise InvalidPrintRequestError(f"Field '{name}' must be >= {minimum} (got {value})", field=name)
    return value


@dataclass(frozen=True)
class PrintRequest:
    """
    One page-print submission.

    This is a FROZEN dataclass - all attributes are read-only after creation.
    """

    page: int
    """1-based page of the transformed document to print."""

    total_pages_in_batch: int
    """Number of physical pages in the batch (after N-up imposition)."""

    sheets_remaining_in_batch: int
    """copies x remaining pages; checked against the paper count."""

    npps: int
    """Source pages per physical sheet."""

    color_mode: ColorMode
    """Whether the document is converted to grayscale first."""

    copies: int
    """Copies of this page to print."""

    pdf_bytes: bytes = field(repr=False)
    """The original uploaded PDF."""

    def __post_init__(self):
        if self.npps not in SUPPORTED_NPPS:
            raise InvalidPrintRequestError(
                f"Unsupported pages per sheet: {self.npps} (expected one of {SUPPORTED_NPPS})",
                field="npps",
            )
        if self.page > self.total_pages_in_batch:
            raise InvalidPrintRequestError(
                f"Page {self.page} is beyond the batch of {self.total_pages_in_batch} pages",
                field="page",
            )
        if not self.pdf_bytes:
            raise InvalidPrintRequestError("Uploaded PDF is empty", field="pdf")

    @property
    def is_black_and_white(self) -> bool:
        return self.color_mode == ColorMode.BLACK_AND_WHITE

    @classmethod
    def from_form(cls, form: Mapping[str, Any], pdf_bytes: bytes | None) -> "PrintRequest":
        """
        Build from the multipart fields of POST /api/print.

        Fields: total, total_pages, page, npps, color, copies (+ the pdf file).

        Raises:
            InvalidPrintRequestError: On any missing or out-of-range field
        """
        if pdf_bytes is None:
            raise InvalidPrintRequestError("Missing file 'pdf'", field="pdf")

        return cls(
            page=_parse_int(form, "page", 1),
            total_pages_in_batch=_parse_int(form, "total_pages", 1),
            sheets_remaining_in_batch=_parse_int(form, "total", 0),
            npps=_parse_int(form, "npps", 1),
            color_mode=ColorMode.parse(form.get("color")),
            copies=_parse_int(form, "copies", 1),
            pdf_bytes=pdf_bytes,
        )

    def to_form(self) -> Dict[str, str]:
        """Multipart text fields for POST /api/print (the pdf goes separately)."""
        return {
            "page": str(self.page),
            "total": str(self.sheets_remaining_in_batch),
            "total_pages": str(self.total_pages_in_batch),
            "npps": str(self.npps),
            "color": self.color_mode.value,
            "copies": str(self.copies),
        }
