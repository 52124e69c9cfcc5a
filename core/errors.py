# core/errors.py
from __future__ import annotations

from typing import List, Optional


class InvalidTariffConfiguration(ValueError):
    """Tiers empty, non-contiguous or without an unbounded last tier."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid tariff: " + "; ".join(self.problems))


class UnparsableBillEntry(ValueError):
    """A bulk-entered line that does not read as `<month> <kWh>`."""

    def __init__(self, entry: str, reason: Optional[str] = None):
        self.entry = entry
        self.reason = reason or "expected '<month> <kWh>'"
        super().__init__(f"Unparsable bill entry {entry!r}: {self.reason}")
