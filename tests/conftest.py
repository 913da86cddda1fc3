"""
Shared fixtures for PrintU Kiosk tests.

No printer, Ghostscript, pdfjam, poppler or network is needed: external
commands go through FakeCommandRunner, which records every call and creates
the output files the real tools would.
"""

import io
import shutil
from pathlib import Path
from typing import List, Optional
from unittest.mock import MagicMock

import pytest
from pypdf import PdfReader, PdfWriter

from core.command_runner import CommandRunner
from core.exceptions import CommandError
from core.spooler import CupsSpooler
from models.consumables import ConsumablesState
from models.print_request import ColorMode, PrintRequest
from modules.transform_chain import DocumentTransformChain
from services.consumables_service import ConsumablesTracker
from services.print_service import PrintService


FAKE_JPEG = b"\xff\xd8\xff\xe0fake-jpeg"


def make_pdf(pages: int = 1) -> bytes:
    """A real, blank Letter-sized PDF."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _arg_after(args: List[str], flag: str) -> str:
    return args[args.index(flag) + 1]


class FakeCommandRunner(CommandRunner):
    """
    Stands in for subprocess.

    Attributes:
        calls: Every command line run, in order
        pdf_snapshots: PDFs present in `watch_dir` when each command ran
        queue_output: What `lpstat -o` prints ("" means idle)
        ink_output: What the ink tool prints
        default_destination: What `lpstat -d` prints
        fail_on: Programs that exit non-zero
    """

    def __init__(self, watch_dir: Optional[Path] = None):
        super().__init__()
        self.watch_dir = watch_dir
        self.calls: List[List[str]] = []
        self.pdf_snapshots: List[List[str]] = []
        self.queue_output = ""
        self.ink_output = "Black: 80%\nCyan: 75%\nMagenta: 70%\nYellow: 65%\n"
        self.default_destination = "system default destination: Epson_L3150\n"
        self.fail_on = set()

    def programs(self) -> List[str]:
        return [call[0] for call in self.calls]

    def run(self, args, error_cls=CommandError) -> str:
        cmd = [str(a) for a in args]
        self.calls.append(cmd)
        if self.watch_dir is not None:
            self.pdf_snapshots.append(sorted(p.name for p in self.watch_dir.glob("*.pdf")))

        program = cmd[0]
        if program in self.fail_on:
            raise error_cls(cmd, 1, f"{program}: simulated failure")

        if program == "lpstat":
            return self.default_destination if "-d" in cmd else self.queue_output
        if program == "ink":
            return self.ink_output
        if program == "lp":
            return "request id is Epson_L3150-42 (1 file(s))\n"
        if program == "gs":
            shutil.copyfile(_arg_after(cmd, "-f"), _arg_after(cmd, "-o"))
        elif program == "pdfjam":
            shutil.copyfile(cmd[-1], _arg_after(cmd, "--outfile"))
        elif program == "pdftoppm":
            page = int(_arg_after(cmd, "-f"))
            source, root = cmd[-2], cmd[-1]
            width = len(str(len(PdfReader(source).pages)))
            Path(f"{root}-{str(page).zfill(width)}.jpg").write_bytes(FAKE_JPEG)
        return ""


# Fixtures

@pytest.fixture
def pdf_bytes():
    return make_pdf(1)


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def runner(workdir):
    return FakeCommandRunner(watch_dir=workdir)


@pytest.fixture
def spooler(runner):
    return CupsSpooler(runner)


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def state():
    return ConsumablesState(paper_count=50)


@pytest.fixture
def tracker(spooler, notifier, state):
    return ConsumablesTracker(spooler, notifier, state, low_paper_threshold=10)


@pytest.fixture
def transform_chain(runner, workdir):
    return DocumentTransformChain(runner, workdir)


@pytest.fixture
def print_service(tracker, transform_chain, spooler):
    return PrintService(tracker, transform_chain, spooler)


@pytest.fixture
def make_request(pdf_bytes):
    """Factory for PrintRequest with single-page color defaults."""
    def _make(**overrides):
        fields = dict(
            page=1,
            total_pages_in_batch=1,
            sheets_remaining_in_batch=1,
            npps=1,
            color_mode=ColorMode.COLOR,
            copies=1,
            pdf_bytes=pdf_bytes,
        )
        fields.update(overrides)
        return PrintRequest(**fields)
    return _make
