# tariffs/engine.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.models import Escalation, TariffConfig, TariffTier


@dataclass(frozen=True)
class BillBreakdown:
    energy: float
    fuel_surcharge: float
    fixed_charge: float

    @property
    def total(self) -> float:
        return self.energy + self.fuel_surcharge + self.fixed_charge


# ==========================================================
# Helpers
# ==========================================================
def escalation_factor(year: int, rate: float) -> float:
    return (1.0 + float(rate)) ** (int(year) - 1)


def tier_capacity(tier: TariffTier) -> Optional[float]:
    """kWh billable inside the tier; None for the unbounded one.

    A tier "2001-4000" holds 2000 kWh, and so does "0-2000" or "1-2000".
    """
    if tier.to_kwh is None:
        return None
    start = max(float(tier.from_kwh) - 1.0, 0.0)
    return max(0.0, float(tier.to_kwh) - start)


def _factors(escalation: Optional[Escalation]):
    if escalation is None:
        return 1.0, 1.0
    f = escalation_factor(escalation.year, escalation.rate)
    return f, (f if escalation.escalate_fuel_surcharge else 1.0)


# ==========================================================
# Public API
# ==========================================================
def bill_breakdown(
    consumption_kwh: float,
    tariff: TariffConfig,
    escalation: Optional[Escalation] = None,
) -> BillBreakdown:
    fixed = float(tariff.fixed_monthly_charge)
    consumption = float(consumption_kwh)
    if consumption <= 0:
        return BillBreakdown(energy=0.0, fuel_surcharge=0.0, fixed_charge=fixed)

    f_rate, f_fuel = _factors(escalation)

    energy = 0.0
    remaining = consumption
    for tier in tariff.tiers:
        if remaining <= 0:
            break
        cap = tier_capacity(tier)
        used = remaining if cap is None else min(remaining, cap)
        energy += used * float(tier.rate_per_kwh) * f_rate
        remaining -= used

    fuel = consumption * float(tariff.fuel_surcharge_per_kwh) * f_fuel
    return BillBreakdown(energy=energy, fuel_surcharge=fuel, fixed_charge=fixed)


def bill_amount(
    consumption_kwh: float,
    tariff: TariffConfig,
    escalation: Optional[Escalation] = None,
) -> float:
    return bill_breakdown(consumption_kwh, tariff, escalation).total


def marginal_rate(consumption_kwh: float, tariff: TariffConfig) -> float:
    """Rate of the tier that contains `consumption_kwh` (unescalated)."""
    if not tariff.tiers:
        return 0.0
    c = float(consumption_kwh)
    for tier in tariff.tiers:
        if tier.to_kwh is None or c <= float(tier.to_kwh):
            return float(tier.rate_per_kwh)
    return float(tariff.tiers[-1].rate_per_kwh)


def top_tier_rate(tariff: TariffConfig) -> float:
    return marginal_rate(float("inf"), tariff)
