# tariffs/validation.py
from __future__ import annotations

import logging
from typing import List, Optional

from core.errors import InvalidTariffConfiguration
from core.models import TariffConfig, TariffTier

logger = logging.getLogger(__name__)


# ==========================================================
# Invariants
# ==========================================================
def tariff_problems(tariff: TariffConfig) -> List[str]:
    tiers = list(tariff.tiers or [])
    if not tiers:
        return ["tariff has no tiers"]

    problems: List[str] = []

    if float(tiers[0].from_kwh) not in (0.0, 1.0):
        problems.append(f"first tier must start at 0 or 1 kWh (starts at {tiers[0].from_kwh})")

    unbounded = [i for i, t in enumerate(tiers) if t.to_kwh is None]
    if len(unbounded) != 1:
        problems.append(f"exactly one unbounded tier required (found {len(unbounded)})")
    elif unbounded[0] != len(tiers) - 1:
        problems.append("the unbounded tier must be the last one")

    for i, t in enumerate(tiers):
        if float(t.rate_per_kwh) < 0:
            problems.append(f"tier {i + 1}: negative rate")
        if t.to_kwh is not None and float(t.to_kwh) < float(t.from_kwh):
            problems.append(f"tier {i + 1}: upper bound below lower bound")

    for i in range(len(tiers) - 1):
        cur, nxt = tiers[i], tiers[i + 1]
        if cur.to_kwh is None:
            continue
        if float(nxt.from_kwh) != float(cur.to_kwh) + 1:
            problems.append(
                f"tiers {i + 1}-{i + 2} not contiguous ({cur.to_kwh} -> {nxt.from_kwh})"
            )

    return problems


def validate_tariff(tariff: TariffConfig) -> None:
    problems = tariff_problems(tariff)
    if problems:
        raise InvalidTariffConfiguration(problems)


def ensure_valid_tariff(tariff: Optional[TariffConfig], utility: Optional[str] = None) -> TariffConfig:
    """Return `tariff` if valid, otherwise the utility's default tariff."""
    from .defaults import default_tariff

    if tariff is not None:
        problems = tariff_problems(tariff)
        if not problems:
            return tariff
        logger.warning("Tariff reset to %s default: %s", utility or "utility", "; ".join(problems))

    return default_tariff(utility)


# ==========================================================
# Tier editing (always returns a new list)
# ==========================================================
def add_tier(tiers: List[TariffTier], step_kwh: float = 2000.0, rate_step: float = 0.05) -> List[TariffTier]:
    """Split the unbounded tier: it becomes bounded and a pricier unbounded tier follows."""
    if not tiers:
        return [TariffTier(from_kwh=0, to_kwh=None, rate_per_kwh=0.23)]

    last = tiers[-1]
    if last.to_kwh is None:
        new_from = float(last.from_kwh) + float(step_kwh)
    else:
        new_from = float(last.to_kwh) + 1

    closed = TariffTier(from_kwh=last.from_kwh, to_kwh=new_from - 1, rate_per_kwh=last.rate_per_kwh)
    opened = TariffTier(
        from_kwh=new_from,
        to_kwh=None,
        rate_per_kwh=round(float(last.rate_per_kwh) + float(rate_step), 2),
    )
    return list(tiers[:-1]) + [closed, opened]


def remove_tier(tiers: List[TariffTier], index: int) -> List[TariffTier]:
    """Drop a tier; the tier before a removed last tier becomes unbounded."""
    if not 0 <= index < len(tiers):
        raise IndexError(f"tier index out of range: {index}")

    out = [t for i, t in enumerate(tiers) if i != index]
    if not out:
        return out

    if index == len(tiers) - 1:
        prev = out[-1]
        out[-1] = TariffTier(from_kwh=prev.from_kwh, to_kwh=None, rate_per_kwh=prev.rate_per_kwh)
    elif index > 0:
        # re-stitch the gap left by an inner tier
        prev, nxt = out[index - 1], out[index]
        out[index] = TariffTier(
            from_kwh=float(prev.to_kwh) + 1 if prev.to_kwh is not None else nxt.from_kwh,
            to_kwh=nxt.to_kwh,
            rate_per_kwh=nxt.rate_per_kwh,
        )
    else:
        first = out[0]
        out[0] = TariffTier(from_kwh=0, to_kwh=first.to_kwh, rate_per_kwh=first.rate_per_kwh)
    return out


def update_tier_upper_bound(tiers: List[TariffTier], index: int, to_kwh: float) -> List[TariffTier]:
    """
    Move a tier's upper bound; the following tier's lower bound follows it.

    The unbounded last tier has no bound to move, and the new bound must stay
    at or above the tier's start and below the next tier's end.
    """
    if not 0 <= index < len(tiers):
        raise IndexError(f"tier index out of range: {index}")
    if index == len(tiers) - 1:
        raise ValueError("the last tier is unbounded; its upper bound cannot be set")

    out = list(tiers)
    cur = out[index]
    nxt = out[index + 1]
    to = float(to_kwh)
    if to < float(cur.from_kwh):
        raise ValueError(f"upper bound {to} below the tier start {cur.from_kwh}")
    if nxt.to_kwh is not None and to + 1 > float(nxt.to_kwh):
        raise ValueError(f"upper bound {to} leaves tier {index + 2} empty (it ends at {nxt.to_kwh})")

    out[index] = TariffTier(from_kwh=cur.from_kwh, to_kwh=to, rate_per_kwh=cur.rate_per_kwh)
    out[index + 1] = TariffTier(from_kwh=to + 1, to_kwh=nxt.to_kwh, rate_per_kwh=nxt.rate_per_kwh)
    return out
