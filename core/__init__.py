"""
Core module for PrintU Kiosk.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- command_runner: External command execution
- spooler: CUPS and ink tool access
"""

from .exceptions import (
    KioskError,
    PrinterNotConfiguredError,
    CommandError,
    SpoolerQueryError,
    SpoolSubmissionError,
    InvalidPrintRequestError,
    TransformError,
    ClientError,
    BackendError,
    UpstreamError,
    PrintTimeoutError,
    ConfirmationError,
)
from .command_runner import CommandRunner
from .spooler import CupsSpooler

__all__ = [
    "KioskError",
    "PrinterNotConfiguredError",
    "CommandError",
    "SpoolerQueryError",
    "SpoolSubmissionError",
    "InvalidPrintRequestError",
    "TransformError",
    "ClientError",
    "BackendError",
    "UpstreamError",
    "PrintTimeoutError",
    "ConfirmationError",
    "CommandRunner",
    "CupsSpooler",
]
