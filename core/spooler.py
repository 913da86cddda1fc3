"""
CUPS spooler access.

This module wraps the small set of CUPS (and ink tool) commands the kiosk
needs. The printer itself is treated as opaque: every query returns text and
every action is fire-and-forget beyond its exit status.

Commands:
    lpstat -d        default destination check (startup only)
    lpstat -o        queued/active jobs; empty output means idle
    cancel -a        flush every queued job
    lp -s -P ...     submit one page of a PDF
    ink -p usb       ink levels as `<name>: <percent>%` lines

FAIL FAST BEHAVIOR:
    - verify_default_destination() raises PrinterNotConfiguredError when CUPS
      has no default printer; the server refuses to start.

Usage:
    spooler = CupsSpooler(CommandRunner())
    spooler.verify_default_destination()

    if not spooler.is_busy():
        spooler.submit(Path("tmp/abcd1234.pdf"), page=3, copies=2)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .command_runner import CommandRunner
from .exceptions import (
    CommandError,
    PrinterNotConfiguredError,
    SpoolerQueryError,
    SpoolSubmissionError,
)


NO_DEFAULT_DESTINATION = "no system default destination"


class CupsSpooler:
    """
    Thin adapter over the CUPS command line tools.

    Attributes:
        media: Media size passed to `lp -o media=...`
        ink_device: Device flag passed to the ink tool (`ink -p <device>`)
    """

    def __init__(
        self,
        runner: CommandRunner,
        media: str = "Letter",
        ink_device: str = "usb",
        logger: Optional[logging.Logger] = None,
    ):
        self._runner = runner
        self.media = media
        self.ink_device = ink_device
        self._logger = logger or logging.getLogger("core.spooler")

    def verify_default_destination(self) -> str:
        """
        Check that CUPS has a default destination.

        Returns:
            The `lpstat -d` output (e.g. "system default destination: Epson")

        Raises:
            PrinterNotConfiguredError: If lpstat fails or reports no default
        """
        try:
            output = self._runner.run(["lpstat", "-d"])
        except CommandError as e:
            raise PrinterNotConfiguredError(e.output) from e

        if output.strip() == NO_DEFAULT_DESTINATION:
            raise PrinterNotConfiguredError(output)

        self._logger.info(output.strip())
        return output

    def queue_status(self) -> str:
        """
        Raw `lpstat -o` output.

        Raises:
            SpoolerQueryError: If lpstat cannot run
        """
        return self._runner.run(["lpstat", "-o"], error_cls=SpoolerQueryError)

    def is_busy(self) -> bool:
        """True when any job is queued or printing."""
        return self.queue_status() != ""

    def cancel_all(self) -> None:
        """
        Flush the entire print queue.

        Raises:
            CommandError: If `cancel -a` fails
        """
        self._logger.warning("Cancelling all queued print jobs")
        self._runner.run(["cancel", "-a"])

    def submit(self, pdf_path: Path, *, page: int, copies: int) -> None:
        """
        Spool a single page of `pdf_path`.

        The PDF's own page selection prints only `page`; copy count and N-up
        layout are already encoded in the artifact and `copies`.

        Raises:
            SpoolSubmissionError: If lp exits non-zero
        """
        if copies < 1:
            raise SpoolSubmissionError(["lp"], None, f"copies must be >= 1 (got {copies})")

        cmd = [
            "lp",
            "-s",
            "-P", str(page),
            "-n", str(copies),
            "-o", f"media={self.media}",
            str(pdf_path),
        ]
        self._runner.run(cmd, error_cls=SpoolSubmissionError)
        self._logger.info(f"Spooled page {page} x{copies} ({pdf_path.name})")

    def ink_report(self) -> str:
        """
        Raw ink tool output.

        Raises:
            SpoolerQueryError: If the ink tool cannot run
        """
        return self._runner.run(["ink", "-p", self.ink_device], error_cls=SpoolerQueryError)
