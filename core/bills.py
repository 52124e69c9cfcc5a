# core/bills.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from energy.seasonal import MONTH_NAMES, SUMMER_MONTHS
from .errors import UnparsableBillEntry
from .models import Bill

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[,;\n]+")
_ENTRY = re.compile(r"^([A-Za-z]+|\d{1,2}(?=[\s\-:]))[\s\-:]*(\d+(?:\.\d+)?)$")

NO_SUMMER_WARNING = "Estimate may be low: include at least one summer bill (May-September) for accuracy."


@dataclass(frozen=True)
class BillImport:
    bills: List[Bill]
    skipped: int = 0
    duplicates: int = 0


@dataclass(frozen=True)
class ConsumptionStats:
    annual_kwh: float
    monthly_avg_kwh: float
    daily_avg_kwh: float
    summer_avg_kwh: float
    winter_avg_kwh: float
    summer_spike_pct: float


@dataclass(frozen=True)
class MonthlySeries:
    consumption_kwh: List[float]
    estimated_months: List[int] = field(default_factory=list)
    warning: Optional[str] = None


# ==========================================================
# Parsing
# ==========================================================
def parse_month(token: str) -> int:
    """'Jan', 'january', 'ja' or '1' -> 1. Raises UnparsableBillEntry."""
    t = str(token).strip().lower()
    if t.isdigit():
        n = int(t)
        if 1 <= n <= 12:
            return n
        raise UnparsableBillEntry(token, "month number out of range")
    if t:
        for i, name in enumerate(MONTH_NAMES):
            if name.lower().startswith(t):
                return i + 1
    raise UnparsableBillEntry(token, "unknown month")


def parse_bill_line(entry: str) -> Bill:
    m = _ENTRY.match(str(entry).strip())
    if not m:
        raise UnparsableBillEntry(entry)
    month = parse_month(m.group(1))
    kwh = float(m.group(2))
    if kwh <= 0:
        raise UnparsableBillEntry(entry, "consumption must be positive")
    return Bill(month=month, consumption_kwh=kwh, is_estimated=False)


def parse_bulk_bills(text: str, existing: Iterable[Bill] = ()) -> BillImport:
    """
    Parse free text such as "Jan 1200, Feb 1100; March 1500".
    Bad entries are skipped one by one and only counted.
    """
    seen = {b.month for b in existing}
    bills: List[Bill] = []
    skipped = 0
    duplicates = 0

    for entry in _SEPARATORS.split(text or ""):
        if not entry.strip():
            continue
        try:
            bill = parse_bill_line(entry)
        except UnparsableBillEntry as e:
            skipped += 1
            logger.debug("Skipping bill entry: %s", e)
            continue
        if bill.month in seen:
            duplicates += 1
            continue
        seen.add(bill.month)
        bills.append(bill)

    if skipped:
        logger.warning("Bulk bill import skipped %d unparsable entr%s", skipped, "y" if skipped == 1 else "ies")

    bills.sort(key=lambda b: b.month)
    return BillImport(bills=bills, skipped=skipped, duplicates=duplicates)


def merge_bills(current: Sequence[Bill], new: Sequence[Bill]) -> List[Bill]:
    """First bill per month wins; result sorted Jan..Dec."""
    out = {}
    for b in list(current) + list(new):
        out.setdefault(b.month, b)
    return [out[m] for m in sorted(out)]


# ==========================================================
# Seasonal extrapolation
# ==========================================================
def _unique_by_month(bills: Sequence[Bill]) -> List[Bill]:
    return merge_bills(bills, [])


def estimate_missing_months(bills: Sequence[Bill], seasonal_factors: Sequence[float]) -> MonthlySeries:
    """
    Fill the months without a bill: every known bill is de-seasonalized with the
    city factor, averaged, and re-seasonalized for the missing months.
    """
    known = [b for b in _unique_by_month(bills) if 1 <= b.month <= 12]
    if len(seasonal_factors) != 12:
        raise ValueError("seasonal_factors must have 12 values")

    if not known:
        return MonthlySeries(consumption_kwh=[0.0] * 12)

    base = sum(float(b.consumption_kwh) / float(seasonal_factors[b.month - 1]) for b in known) / len(known)

    series = [0.0] * 12
    for b in known:
        series[b.month - 1] = float(b.consumption_kwh)

    estimated: List[int] = []
    provided = {b.month for b in known}
    for month in range(1, 13):
        if month not in provided:
            series[month - 1] = float(round(base * float(seasonal_factors[month - 1])))
            estimated.append(month)

    warning = None
    if estimated and not provided.intersection(SUMMER_MONTHS):
        warning = NO_SUMMER_WARNING

    return MonthlySeries(consumption_kwh=series, estimated_months=estimated, warning=warning)


def estimated_bills(bills: Sequence[Bill], seasonal_factors: Sequence[float]) -> List[Bill]:
    s = estimate_missing_months(bills, seasonal_factors)
    return [Bill(month=m, consumption_kwh=s.consumption_kwh[m - 1], is_estimated=True) for m in s.estimated_months]


def normalize_bills(bills: Sequence[Bill], seasonal_factors: Sequence[float]) -> MonthlySeries:
    return estimate_missing_months(bills, seasonal_factors)


# ==========================================================
# Stats
# ==========================================================
def consumption_stats(monthly_kwh: Sequence[float]) -> ConsumptionStats:
    vals = [float(x or 0.0) for x in monthly_kwh]
    annual = sum(vals)
    if annual <= 0:
        return ConsumptionStats(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    summer = [v for i, v in enumerate(vals) if (i + 1) in SUMMER_MONTHS]
    winter = [v for i, v in enumerate(vals) if (i + 1) not in SUMMER_MONTHS]
    summer_avg = sum(summer) / len(summer) if summer else 0.0
    winter_avg = sum(winter) / len(winter) if winter else 0.0
    spike = ((summer_avg - winter_avg) / winter_avg * 100.0) if winter_avg > 0 else 0.0

    return ConsumptionStats(
        annual_kwh=annual,
        monthly_avg_kwh=annual / 12.0,
        daily_avg_kwh=annual / 365.0,
        summer_avg_kwh=summer_avg,
        winter_avg_kwh=winter_avg,
        summer_spike_pct=spike,
    )
