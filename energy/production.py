# energy/production.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from core.models import SystemConfig
from .seasonal import DAYS_IN_MONTH, normalized_city_factors


@dataclass(frozen=True)
class ProductionResult:
    system_size_kwp: float
    inverter_capacity_kw: float
    unclipped_kwh: List[float]
    monthly_kwh: List[float]
    clipping_loss_kwh: List[float]

    @property
    def annual_kwh(self) -> float:
        return float(sum(self.monthly_kwh))

    @property
    def annual_clipping_loss_kwh(self) -> float:
        return float(sum(self.clipping_loss_kwh))


# ==========================================================
# Factors
# ==========================================================
def bifacial_factor(system: SystemConfig) -> float:
    return float(system.bifacial_boost) if system.bifacial_enabled else 1.0


def total_efficiency_factor(system: SystemConfig) -> float:
    return (
        float(system.component_efficiency)
        * float(system.environmental_loss_factor)
        * bifacial_factor(system)
    )


def inverter_capacity_for(system_size_kwp: float, system: SystemConfig) -> float:
    return float(system_size_kwp) * float(system.inverter_sizing_ratio)


# ==========================================================
# Monthly model
# ==========================================================
def simulate_production(
    system_size_kwp: float,
    city: Optional[str],
    system: SystemConfig,
    inverter_capacity_kw: Optional[float] = None,
    factors: Optional[List[float]] = None,
) -> ProductionResult:
    """
    Monthly AC output of the array, clipped by the inverter.

    `factors` are already-normalized monthly weights; by default they come from
    the city's seasonal table.
    """
    weights = list(factors) if factors is not None else normalized_city_factors(city)
    size = max(0.0, float(system_size_kwp))
    inv_kw = inverter_capacity_for(size, system) if inverter_capacity_kw is None else float(inverter_capacity_kw)

    psh = float(system.peak_sun_hours)
    eff = total_efficiency_factor(system)

    unclipped: List[float] = []
    clipped: List[float] = []
    losses: List[float] = []
    for w, days in zip(weights, DAYS_IN_MONTH):
        raw = size * psh * days * w * eff
        cap = max(0.0, inv_kw) * psh * days
        out = min(raw, cap)
        unclipped.append(raw)
        clipped.append(out)
        losses.append(raw - out)

    return ProductionResult(
        system_size_kwp=size,
        inverter_capacity_kw=inv_kw,
        unclipped_kwh=unclipped,
        monthly_kwh=clipped,
        clipping_loss_kwh=losses,
    )


def monthly_production(
    system_size_kwp: float,
    city: Optional[str],
    system: SystemConfig,
    inverter_capacity_kw: Optional[float] = None,
) -> List[float]:
    return simulate_production(system_size_kwp, city, system, inverter_capacity_kw).monthly_kwh


def annual_production(
    system_size_kwp: float,
    city: Optional[str],
    system: SystemConfig,
    inverter_capacity_kw: Optional[float] = None,
) -> float:
    return simulate_production(system_size_kwp, city, system, inverter_capacity_kw).annual_kwh
