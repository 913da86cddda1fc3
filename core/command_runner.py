"""
External command wrapper.

Every interaction with the printing stack (CUPS, Ghostscript, pdfjam,
poppler, the ink tool) goes through CommandRunner so that:
    - command lines are logged consistently
    - failures surface as CommandError (or a caller-chosen subclass)
    - tests can swap in a fake runner without touching subprocess

Usage:
    runner = CommandRunner()
    stdout = runner.run(["lpstat", "-o"])
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Sequence, Type

from .exceptions import CommandError


class CommandRunner:
    """
    Runs external commands and returns their standard output.

    Commands are always passed as argument lists (never through a shell),
    so file paths with spaces or quotes need no escaping.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        timeout_seconds: Optional[float] = 120.0,
    ):
        self._logger = logger or logging.getLogger("core.command_runner")
        self._timeout = timeout_seconds

    def run(
        self,
        args: Sequence[str],
        error_cls: Type[CommandError] = CommandError,
    ) -> str:
        """
        Run a command and return its stdout.

        Args:
            args: Program and arguments
            error_cls: CommandError subclass raised on failure

        Returns:
            Captured standard output (text)

        Raises:
            error_cls: If the program is missing, times out or exits non-zero
        """
        cmd = [str(a) for a in args]
        self._logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            self._logger.error(f"Command not found: {cmd[0]}")
            raise error_cls(cmd, None, str(e)) from e
        except subprocess.TimeoutExpired as e:
            self._logger.error(f"Command timed out after {self._timeout}s: {cmd[0]}")
            raise error_cls(cmd, None, f"timed out after {self._timeout}s") from e

        if proc.returncode != 0:
            out = (proc.stdout or "") + (proc.stderr or "")
            self._logger.warning(f"{cmd[0]} exited with rc={proc.returncode}: {out.strip()}")
            raise error_cls(cmd, proc.returncode, out)

        return proc.stdout or ""
