# energy/sizing.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from core.configuration import deep_merge, panel_geometry
from core.models import (
    BATTERY_NIGHT_BACKUP,
    BATTERY_STORE_UNUSED,
    ORIENTATION_LANDSCAPE,
    ORIENTATION_PORTRAIT,
    REGIME_NET_METERING,
    BatteryConfig,
    SizingResult,
    SystemConfig,
)
from .production import simulate_production, total_efficiency_factor
from .seasonal import DAYS_IN_MONTH


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(x)))


# ==========================================================
# Target policy
# ==========================================================
def target_annual_production(
    annual_consumption_kwh: float,
    regime: str,
    system: SystemConfig,
    battery: BatteryConfig,
) -> float:
    annual = max(0.0, float(annual_consumption_kwh))
    day_frac = _clamp(system.daytime_consumption_fraction, 0.0, 1.0)

    if regime == REGIME_NET_METERING:
        return annual
    if battery.enabled and battery.mode == BATTERY_NIGHT_BACKUP:
        return annual
    return annual * day_frac


# ==========================================================
# Geometry
# ==========================================================
def area_per_panel(orientation: str, geometry: Optional[Dict[str, Any]] = None) -> float:
    """Footprint of one panel with row spacing; `geometry` overrides the configured panel."""
    g = deep_merge(panel_geometry(), geometry or {})
    length = float(g["length_m"])
    width = float(g["width_m"])
    spacing = g["spacing_factor"]
    key = ORIENTATION_LANDSCAPE if orientation == ORIENTATION_LANDSCAPE else ORIENTATION_PORTRAIT
    return length * width * float(spacing[key])


def panel_count_for(ideal_size_kwp: float, panel_wattage_w: float) -> int:
    if panel_wattage_w <= 0:
        raise ValueError("Invalid panel (W <= 0).")
    return max(1, int(math.ceil((float(ideal_size_kwp) * 1000.0) / float(panel_wattage_w))))


# ==========================================================
# Battery
# ==========================================================
def daytime_excess_by_month(
    production_kwh: List[float],
    monthly_consumption_kwh: List[float],
    system: SystemConfig,
) -> List[float]:
    day_frac = _clamp(system.daytime_consumption_fraction, 0.0, 1.0)
    return [
        max(0.0, float(p) - float(c) * day_frac)
        for p, c in zip(production_kwh, monthly_consumption_kwh)
    ]


def battery_capacity_for(
    monthly_consumption_kwh: List[float],
    production_kwh: List[float],
    system: SystemConfig,
    battery: BatteryConfig,
) -> float:
    if not battery.enabled:
        return 0.0
    if battery.capacity_kwh is not None:
        return max(0.0, float(battery.capacity_kwh))

    denom = float(battery.usable_depth_of_discharge) * float(battery.round_trip_efficiency)
    if denom <= 0:
        return 0.0

    if battery.mode == BATTERY_STORE_UNUSED:
        # sized to the worst month, not the average
        excess = daytime_excess_by_month(production_kwh, monthly_consumption_kwh, system)
        daily = max((e / d for e, d in zip(excess, DAYS_IN_MONTH)), default=0.0)
    else:
        annual = float(sum(monthly_consumption_kwh))
        night_frac = 1.0 - _clamp(system.daytime_consumption_fraction, 0.0, 1.0)
        daily = annual * night_frac / 365.0

    return float(math.ceil(daily / denom)) if daily > 0 else 0.0


# ==========================================================
# Public API
# ==========================================================
def size_system(
    monthly_consumption_kwh: List[float],
    city: Optional[str],
    regime: str,
    system: SystemConfig,
    battery: BatteryConfig,
    geometry: Optional[Dict[str, Any]] = None,
) -> SizingResult:
    """
    Annual-energy sizing: the policy target is turned into panels, then the
    actual array is run through the seasonal model so the monthly figures
    already include inverter clipping.
    """
    if len(monthly_consumption_kwh) != 12:
        raise ValueError("monthly_consumption_kwh must have 12 values")

    annual = float(sum(monthly_consumption_kwh))
    target = target_annual_production(annual, regime, system, battery)

    denom = float(system.peak_sun_hours) * 365.0 * total_efficiency_factor(system)
    ideal = target / denom if denom > 0 else 0.0

    n_panels = panel_count_for(ideal, system.panel_wattage_w)
    actual = n_panels * float(system.panel_wattage_w) / 1000.0
    area = n_panels * area_per_panel(system.panel_orientation, geometry)
    inverter_kw = actual * float(system.inverter_sizing_ratio)

    prod = simulate_production(actual, city, system, inverter_capacity_kw=inverter_kw)
    # exports are banked as credits under net metering
    battery_kwh = 0.0
    if regime != REGIME_NET_METERING:
        battery_kwh = battery_capacity_for(monthly_consumption_kwh, prod.monthly_kwh, system, battery)

    unused = 0.0
    if regime != REGIME_NET_METERING:
        unused = float(sum(daytime_excess_by_month(prod.monthly_kwh, monthly_consumption_kwh, system)))

    exceeds = area > float(system.available_area_m2)
    advisories = _advisories(area, system, regime, battery, unused, prod.annual_clipping_loss_kwh)

    return SizingResult(
        panel_count=n_panels,
        actual_system_size_kwp=actual,
        inverter_capacity_kw=inverter_kw,
        area_required_m2=area,
        monthly_production_kwh=list(prod.monthly_kwh),
        annual_production_kwh=prod.annual_kwh,
        battery_capacity_kwh=battery_kwh,
        ideal_size_kwp=ideal,
        target_annual_kwh=target,
        clipping_loss_kwh=prod.annual_clipping_loss_kwh,
        unused_solar_kwh=unused,
        exceeds_available_area=exceeds,
        advisories=advisories,
    )


def _advisories(
    area: float,
    system: SystemConfig,
    regime: str,
    battery: BatteryConfig,
    unused_kwh: float,
    clipping_kwh: float,
) -> List[str]:
    out: List[str] = []
    if area > float(system.available_area_m2):
        out.append(
            f"Required area {area:,.1f} m2 exceeds available {float(system.available_area_m2):,.1f} m2."
        )
    if regime != REGIME_NET_METERING and unused_kwh > 0:
        if battery.enabled:
            out.append(f"{unused_kwh:,.0f} kWh/yr of daytime surplus depends on battery storage.")
        else:
            out.append(f"{unused_kwh:,.0f} kWh/yr of solar exceeds daytime use and is lost without a battery.")
    if clipping_kwh > 0:
        out.append(f"Inverter clipping removes {clipping_kwh:,.0f} kWh/yr.")
    return out
