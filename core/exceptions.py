"""
Custom exceptions for PrintU Kiosk.

Exception Hierarchy:
    KioskError (base)
    ├── PrinterNotConfiguredError - No default CUPS destination (startup failure)
    ├── CommandError              - External command missing or non-zero exit
    │   ├── SpoolerQueryError     - Queue status / ink query failed
    │   └── SpoolSubmissionError  - `lp` refused the artifact
    ├── InvalidPrintRequestError  - Malformed print submission (HTTP 400)
    ├── TransformError            - Grayscale / imposition / raster stage failed
    └── ClientError               - Raised on the kiosk client side
        ├── BackendError          - Print backend returned success=false or HTTP failure
        ├── UpstreamError         - Upload service document/PDF fetch failed
        ├── PrintTimeoutError     - Printer never went idle within the page timeout
        └── ConfirmationError     - Page printed but confirmation call failed

Usage:
    Startup errors (PrinterNotConfiguredError) cause the server to fail fast.
    Admission rejections (busy / no ink / not enough papers) are NOT exceptions;
    they are returned as PrintJobOutcome values.
"""

from typing import Optional, Dict, Any, Sequence


class KioskError(Exception):
    """
    Base exception for all PrintU Kiosk errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# STARTUP ERRORS - Server will not start if these occur
# =============================================================================

class PrinterNotConfiguredError(KioskError):
    """
    CUPS reports no usable default destination.

    This is a FATAL error - the kiosk prints to the system default printer only.

    Typical causes:
    - CUPS not installed or not running
    - No printer marked as default (`lpoptions -d <name>`)
    """

    def __init__(self, output: str):
        message = f"No default printer destination: {output.strip() or 'lpstat -d failed'}"
        details = {
            "output": output,
            "resolution": "Install CUPS and set a default destination with `lpoptions -d`",
        }
        super().__init__(message, details)
        self.output = output


# =============================================================================
# RUNTIME ERRORS - Current request fails, server keeps running
# =============================================================================

class CommandError(KioskError):
    """
    An external command could not be run or exited non-zero.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        output: str = "",
    ):
        program = command[0] if command else "<empty>"
        if returncode is None:
            message = f"Command '{program}' could not be started"
        else:
            message = f"Command '{program}' failed (rc={returncode})"
        details = {"command": " ".join(command)}
        if output:
            details["output"] = output.strip()
        super().__init__(message, details)
        self.command = list(command)
        self.returncode = returncode
        self.output = output


class SpoolerQueryError(CommandError):
    """
    The spooler status or ink query failed.

    Callers must treat the printer state as unknown and refuse to proceed.
    """


class InvalidPrintRequestError(KioskError):
    """A print submission is missing fields or carries out-of-range values."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class TransformError(KioskError):
    """
    A document transform stage failed.

    Raised for grayscale conversion, N-up imposition and preview rasterization
    failures. Aborts the current page.
    """

    def __init__(self, stage: str, message: str, token: Optional[str] = None):
        details = {"stage": stage}
        if token:
            details["token"] = token
        super().__init__(message, details)
        self.stage = stage
        self.token = token


class SpoolSubmissionError(CommandError):
    """The spooler refused the print-ready artifact."""


# =============================================================================
# CLIENT ERRORS - Terminal for the current print run
# =============================================================================

class ClientError(KioskError):
    """Base class for failures seen by the kiosk page orchestrator."""


class BackendError(ClientError):
    """The print backend rejected a request or could not be reached."""


class UpstreamError(ClientError):
    """The upload service could not supply the document or its PDF."""


class PrintTimeoutError(ClientError):
    """
    The printer did not report idle within the per-page timeout.

    The orchestrator cancels every queued job before surfacing this.
    """

    MESSAGE = "Printer timed out! Printer could be out of paper or ink. Please try again later"

    def __init__(self, page: int, timeout_seconds: float):
        super().__init__(
            self.MESSAGE,
            {"page": page, "timeout_seconds": timeout_seconds},
        )
        self.page = page
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        return self.message


class ConfirmationError(ClientError):
    """
    The upload service did not record a page that physically printed.

    The page is left printed-but-unconfirmed; a re-initiated run prints it again.
    """

    def __init__(self, page: int, reason: str):
        super().__init__(
            f"Could not confirm page {page}: {reason}",
            {"page": page},
        )
        self.page = page
