# energy/battery.py
from __future__ import annotations

from dataclasses import dataclass

from core.models import BatteryConfig


@dataclass(frozen=True)
class DispatchResult:
    direct_use_kwh: float
    excess_kwh: float
    stored_kwh: float
    discharged_kwh: float
    spilled_kwh: float          # excess that never reached the battery (no export in regime B)

    @property
    def saved_kwh(self) -> float:
        return self.direct_use_kwh + self.discharged_kwh

    def scaled(self, k: float) -> "DispatchResult":
        return DispatchResult(
            direct_use_kwh=self.direct_use_kwh * k,
            excess_kwh=self.excess_kwh * k,
            stored_kwh=self.stored_kwh * k,
            discharged_kwh=self.discharged_kwh * k,
            spilled_kwh=self.spilled_kwh * k,
        )


def usable_capacity_kwh(capacity_kwh: float, battery: BatteryConfig) -> float:
    return max(0.0, float(capacity_kwh)) * float(battery.usable_depth_of_discharge)


def dispatch_day(
    production_kwh: float,
    daytime_load_kwh: float,
    nighttime_load_kwh: float,
    capacity_kwh: float,
    battery: BatteryConfig,
) -> DispatchResult:
    """
    One representative day: solar serves the daytime load first, the excess
    charges the battery (round-trip loss applied on charge) and the battery
    covers the night. Whatever the battery cannot take is lost.
    """
    prod = max(0.0, float(production_kwh))
    day = max(0.0, float(daytime_load_kwh))
    night = max(0.0, float(nighttime_load_kwh))

    direct = min(prod, day)
    excess = prod - direct

    rte = float(battery.round_trip_efficiency)
    if not battery.enabled or capacity_kwh <= 0 or rte <= 0:
        return DispatchResult(direct, excess, 0.0, 0.0, excess)

    stored = min(excess * rte, usable_capacity_kwh(capacity_kwh, battery))
    discharged = min(night, stored)
    spilled = max(0.0, excess - stored / rte)

    return DispatchResult(
        direct_use_kwh=direct,
        excess_kwh=excess,
        stored_kwh=stored,
        discharged_kwh=discharged,
        spilled_kwh=spilled,
    )


def dispatch_month(
    production_kwh: float,
    daytime_load_kwh: float,
    nighttime_load_kwh: float,
    days: int,
    capacity_kwh: float,
    battery: BatteryConfig,
) -> DispatchResult:
    """Runs the month's average day and scales it back to the month."""
    d = max(1, int(days))
    day = dispatch_day(
        production_kwh / d,
        daytime_load_kwh / d,
        nighttime_load_kwh / d,
        capacity_kwh,
        battery,
    )
    return day.scaled(d)
