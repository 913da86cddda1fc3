"""
Document transform chain.

Turns the uploaded PDF for one page-print request into a print-ready
artifact plus a JPEG preview of the page being printed.

Stages (strictly sequential, each deletes its input once its output exists):
    1. Token allocation   random hex token, retried until <token>.pdf is free
    2. Color              gs grayscale conversion (BlackAndWhite only)
    3. Imposition         pdfjam N-up layout (npps > 1 only)
    4. Preview            pdftoppm of the requested page -> data URI
    5. Spool              done by the caller inside the `with` block

Artifact lifetime:
    ArtifactChain keeps exactly one live artifact per token and removes every
    file it allocated when the chain closes, on success and on error alike.
    Cleanup failures are logged, never raised.

Usage:
    chain = DocumentTransformChain(CommandRunner(), Path("tmp"))
    with chain.prepare(request) as artifact:
        spooler.submit(artifact.path, page=request.page, copies=request.copies)
    # artifact.path no longer exists here
"""

from __future__ import annotations

import base64
import logging
import secrets
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from core.command_runner import CommandRunner
from core.exceptions import CommandError, TransformError
from models.print_request import PrintRequest
from modules.imposition import layout_for, pdfjam_command
from modules.pdf_analyzer import PDFAnalyzer
from logging_config import get_job_logger


DEFAULT_PAPERSIZE = "{21.6cm,27.9cm}"


def page_index_width(total_pages: int) -> int:
    """Decimal digit count of `total_pages` (pdftoppm's zero padding)."""
    return len(str(max(total_pages, 1)))


def padded_page(page: int, total_pages: int) -> str:
    """`page` left-padded with zeros to the width of `total_pages`."""
    return str(page).zfill(page_index_width(total_pages))


def random_token() -> str:
    return secrets.token_hex(4)


@dataclass(frozen=True)
class PreparedArtifact:
    """Print-ready PDF and preview for one page-print request."""

    token: str
    path: Path
    preview_uri: str


class ArtifactChain:
    """
    Owns the temporary files of one job token.

    `current` is the single live artifact. `advance()` hands off to the next
    stage's output and deletes the previous one.
    """

    def __init__(self, workdir: Path, token: str, logger: logging.Logger):
        self.workdir = workdir
        self.token = token
        self.current: Optional[Path] = None
        self._allocated: List[Path] = []
        self._logger = logger

    def path(self, suffix: str) -> Path:
        """Allocate `<workdir>/<token><suffix>` for this chain."""
        path = self.workdir / f"{self.token}{suffix}"
        self._allocated.append(path)
        return path

    def start(self, data: bytes) -> Path:
        path = self.path(".pdf")
        path.write_bytes(data)
        self.current = path
        return path

    def advance(self, new_path: Path) -> Path:
        """Make `new_path` the live artifact and delete its predecessor."""
        if not new_path.exists():
            raise TransformError("handoff", f"Stage produced no output: {new_path.name}", self.token)
        previous = self.current
        self.current = new_path
        if previous is not None and previous != new_path:
            self.discard(previous)
        return new_path

    def discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            # Leaks temp storage until someone cleans tmp/
            self._logger.warning(f"Could not remove {path}: {e}")

    def close(self) -> None:
        for path in self._allocated:
            self.discard(path)
        self.current = None


class DocumentTransformChain:
    """
    Runs the grayscale / imposition / preview stages for a PrintRequest.

    Attributes:
        workdir: Directory holding temporary artifacts
        papersize: pdfjam paper size for imposed sheets
    """

    def __init__(
        self,
        runner: CommandRunner,
        workdir: Path,
        papersize: str = DEFAULT_PAPERSIZE,
        analyzer: Optional[PDFAnalyzer] = None,
        token_factory: Callable[[], str] = random_token,
    ):
        self._runner = runner
        self.workdir = Path(workdir)
        self.papersize = papersize
        self._analyzer = analyzer or PDFAnalyzer()
        self._token_factory = token_factory

    def allocate_token(self) -> str:
        """Random token whose `<token>.pdf` does not exist yet."""
        while True:
            token = self._token_factory()
            if not (self.workdir / f"{token}.pdf").exists():
                return token

    @contextmanager
    def prepare(self, request: PrintRequest) -> Iterator[PreparedArtifact]:
        """
        Build the print-ready artifact for `request`.

        Yields:
            PreparedArtifact, valid until the `with` block exits

        Raises:
            TransformError: If any stage fails
        """
        self.workdir.mkdir(parents=True, exist_ok=True)
        token = self.allocate_token()
        job_logger = get_job_logger(token)
        chain = ArtifactChain(self.workdir, token, job_logger)

        try:
            chain.start(request.pdf_bytes)
            job_logger.info(
                f"Preparing page {request.page}/{request.total_pages_in_batch} "
                f"(npps={request.npps}, color={request.color_mode.value}, copies={request.copies})"
            )

            if request.is_black_and_white:
                self._grayscale(chain)

            if request.npps > 1:
                self._impose(chain, request.npps)

            preview = self._preview(chain, request.page, request.total_pages_in_batch)

            yield PreparedArtifact(token=token, path=chain.current, preview_uri=preview)

        finally:
            chain.close()
            job_logger.debug("Artifacts removed")

    # ---------- Stages ----------

    def _grayscale(self, chain: ArtifactChain) -> None:
        out = chain.path("-grayscaled.pdf")
        cmd = [
            "gs",
            "-sDEVICE=pdfwrite",
            "-sProcessColorModel=DeviceGray",
            "-sColorConversionStrategy=Gray",
            "-dOverrideICC",
            "-o", str(out),
            "-f", str(chain.current),
        ]
        self._run_stage("grayscale", chain, cmd)
        chain.advance(out)

    def _impose(self, chain: ArtifactChain, npps: int) -> None:
        layout = layout_for(npps)
        out = chain.path("-nup.pdf")
        cmd = pdfjam_command(chain.current, out, layout, self.papersize)
        self._run_stage("imposition", chain, cmd)
        chain.advance(out)

    def _preview(self, chain: ArtifactChain, page: int, total_pages: int) -> str:
        page_count = self._analyzer.page_count(chain.current)
        if page > page_count:
            raise TransformError(
                "preview",
                f"Page {page} is beyond the {page_count} page(s) of the prepared document",
                chain.token,
            )

        root = chain.workdir / chain.token
        raster = chain.path(f"-{padded_page(page, total_pages)}.jpg")
        cmd = ["pdftoppm", "-jpeg", "-f", str(page), "-l", str(page), str(chain.current), str(root)]
        self._run_stage("preview", chain, cmd)

        try:
            encoded = base64.b64encode(raster.read_bytes()).decode("ascii")
        except OSError as e:
            raise TransformError("preview", f"Preview not produced: {raster.name}", chain.token) from e
        finally:
            chain.discard(raster)

        return f"data:image/jpeg;base64,{encoded}"

    def _run_stage(self, stage: str, chain: ArtifactChain, cmd: List[str]) -> None:
        try:
            self._runner.run(cmd)
        except CommandError as e:
            raise TransformError(stage, f"{stage} failed: {e.message}", chain.token) from e
