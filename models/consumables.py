"""
Consumables data models.

ConsumablesState is the process-wide paper/ink bookkeeping owned by one
ConsumablesTracker. InkReport is an immutable parse of the ink tool output.

Paper count is a best-effort estimate: it starts from configuration, drops
on every successful spool, and is never reconciled against the tray.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Tuple


INK_LINE_RE = re.compile(r"^([a-zA-Z]+):\s+([0-9]+)%$")

USABLE_INK_PERCENT = 10
"""A channel is usable only when strictly above this level."""


@dataclass
class ConsumablesState:
    """
    Mutable consumables bookkeeping.

    Only ConsumablesTracker mutates this (under its lock).
    """

    paper_count: int
    """Estimated sheets left in the tray. May go negative."""

    last_ink_notification_key: str = ""
    """Signature of the depleted-ink condition last notified ("" = none)."""


@dataclass(frozen=True)
class InkLevel:
    """One ink channel reading."""

    name: str
    percent: int

    @property
    def usable(self) -> bool:
        return self.percent > USABLE_INK_PERCENT


@dataclass(frozen=True)
class InkReport:
    """Parsed ink tool output."""

    levels: Tuple[InkLevel, ...] = field(default_factory=tuple)

    @property
    def has_ink(self) -> bool:
        """True iff at least one channel is usable."""
        return any(level.usable for level in self.levels)

    @property
    def depleted(self) -> List[str]:
        """Names of channels at or below the usable level, in report order."""
        return [level.name for level in self.levels if not level.usable]

    @property
    def notification_key(self) -> str:
        """
        Signature of the fault condition.

        Empty when nothing is depleted and some ink is usable.
        """
        names = ", ".join(self.depleted)
        if not self.has_ink:
            return f"no ink: {names}"
        return names

    @classmethod
    def parse(cls, output: str) -> "InkReport":
        """Parse `<name>: <percent>%` lines; other lines are ignored."""
        levels = []
        for line in output.split("\n"):
            match = INK_LINE_RE.match(line.strip())
            if match:
                levels.append(InkLevel(name=match.group(1), percent=int(match.group(2))))
        return cls(levels=tuple(levels))
