"""N-up imposition layouts and the pdfjam command that applies them."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from core.exceptions import InvalidPrintRequestError
from models.print_request import SUPPORTED_NPPS


@dataclass(frozen=True)
class NupLayout:
    """Grid used to place several source pages on one sheet."""

    rows: int
    cols: int
    landscape: bool = False

    @property
    def nup(self) -> str:
        """pdfjam `--nup` argument."""
        return f"{self.rows}x{self.cols}"


NUP_LAYOUTS: Dict[int, NupLayout] = {
    2: NupLayout(rows=1, cols=2),
    4: NupLayout(rows=2, cols=2),
    6: NupLayout(rows=3, cols=2, landscape=True),
    9: NupLayout(rows=3, cols=3),
}


def layout_for(npps: int) -> Optional[NupLayout]:
    """
    Grid for `npps` pages per sheet, or None when no imposition is needed.

    Raises:
        InvalidPrintRequestError: For values outside SUPPORTED_NPPS
    """
    if npps not in SUPPORTED_NPPS:
        raise InvalidPrintRequestError(f"Unsupported pages per sheet: {npps}", field="npps")
    return NUP_LAYOUTS.get(npps)


def pdfjam_command(source: Path, outfile: Path, layout: NupLayout, papersize: str) -> List[str]:
    cmd = [
        "pdfjam",
        "--nup", layout.nup,
        "--papersize", papersize,
    ]
    if layout.landscape:
        cmd.append("--landscape")
    cmd += ["--outfile", str(outfile), str(source)]
    return cmd
