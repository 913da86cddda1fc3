"""
Data models for PrintU Kiosk.

This module contains dataclasses for:
- PrintRequest: One page-print submission (frozen)
- Document: Upload service document descriptor (frozen)
- ConsumablesState / InkReport: Paper and ink bookkeeping
- PrintJobOutcome: Result of one page-print call
"""

from .print_request import PrintRequest, ColorMode, SUPPORTED_NPPS
from .document import Document
from .consumables import ConsumablesState, InkLevel, InkReport
from .job_result import PrintJobOutcome, RejectionReason

__all__ = [
    # Request models
    "PrintRequest",
    "ColorMode",
    "SUPPORTED_NPPS",
    "Document",
    # Consumables models
    "ConsumablesState",
    "InkLevel",
    "InkReport",
    # Outcome models
    "PrintJobOutcome",
    "RejectionReason",
]
