# core/sanitize.py
from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, List

from .configuration import emission_factor
from .models import (
    BATTERY_MODES,
    ORIENTATIONS,
    REGIME_NET_METERING,
    REGIMES,
    BatteryConfig,
    Bill,
    ForecastInput,
    RoiParams,
    SystemConfig,
)

logger = logging.getLogger(__name__)

# Fallbacks are the configured defaults (config/*.yaml via core.models).
_SYSTEM = SystemConfig()
_BATTERY = BatteryConfig()
_ROI = RoiParams()


# ==========================================================
# Utilities
# ==========================================================
def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(x)))


def safe_float(x: Any, default: float) -> float:
    """float(x), or `default` for junk, NaN and infinities."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return float(default)
    return v if math.isfinite(v) else float(default)


def safe_int(x: Any, default: int) -> int:
    v = safe_float(x, float("nan"))
    if not math.isfinite(v):
        return int(default)
    return int(v)


def pct_to_fraction(pct: Any, default: float = 0.0) -> float:
    """93 -> 0.93, clamped to [0, 1]."""
    return clamp(safe_float(pct, default * 100.0) / 100.0, 0.0, 1.0)


def _fraction(x: Any, default: float) -> float:
    return clamp(safe_float(x, default), 0.0, 1.0)


def _non_negative(x: Any, default: float) -> float:
    return max(0.0, safe_float(x, default))


# ==========================================================
# Records
# ==========================================================
def sanitize_system_config(s: SystemConfig) -> SystemConfig:
    return replace(
        s,
        peak_sun_hours=clamp(safe_float(s.peak_sun_hours, _SYSTEM.peak_sun_hours), 0.5, 12.0),
        panel_wattage_w=clamp(safe_float(s.panel_wattage_w, _SYSTEM.panel_wattage_w), 1.0, 2000.0),
        component_efficiency=_fraction(s.component_efficiency, _SYSTEM.component_efficiency),
        environmental_loss_factor=_fraction(s.environmental_loss_factor, _SYSTEM.environmental_loss_factor),
        bifacial_boost=clamp(safe_float(s.bifacial_boost, _SYSTEM.bifacial_boost), 1.0, 1.5),
        inverter_sizing_ratio=clamp(safe_float(s.inverter_sizing_ratio, _SYSTEM.inverter_sizing_ratio), 0.1, 3.0),
        panel_orientation=s.panel_orientation if s.panel_orientation in ORIENTATIONS else _SYSTEM.panel_orientation,
        available_area_m2=_non_negative(s.available_area_m2, _SYSTEM.available_area_m2),
        daytime_consumption_fraction=_fraction(s.daytime_consumption_fraction, _SYSTEM.daytime_consumption_fraction),
    )


def sanitize_battery_config(b: BatteryConfig) -> BatteryConfig:
    cap = b.capacity_kwh
    return replace(
        b,
        mode=b.mode if b.mode in BATTERY_MODES else _BATTERY.mode,
        usable_depth_of_discharge=_fraction(b.usable_depth_of_discharge, _BATTERY.usable_depth_of_discharge),
        round_trip_efficiency=_fraction(b.round_trip_efficiency, _BATTERY.round_trip_efficiency),
        capacity_kwh=None if cap is None else _non_negative(cap, 0.0),
    )


def battery_for_regime(b: BatteryConfig, regime: str) -> BatteryConfig:
    """Net metering banks exports as credits, so no battery takes part."""
    if regime == REGIME_NET_METERING and b.enabled:
        logger.debug("Battery disabled under net metering")
        return replace(b, enabled=False)
    return b


def sanitize_roi_params(r: RoiParams) -> RoiParams:
    return replace(
        r,
        first_year_degradation=_fraction(r.first_year_degradation, _ROI.first_year_degradation),
        annual_degradation_rate=_fraction(r.annual_degradation_rate, _ROI.annual_degradation_rate),
        annual_escalation_rate=clamp(safe_float(r.annual_escalation_rate, _ROI.annual_escalation_rate), 0.0, 1.0),
        credit_expiry_months=max(1, safe_int(r.credit_expiry_months, _ROI.credit_expiry_months)),
        maintenance_cost_pct=_fraction(r.maintenance_cost_pct, _ROI.maintenance_cost_pct),
        horizon_years=max(1, safe_int(r.horizon_years, _ROI.horizon_years)),
    )


def sanitize_bills(bills: List[Bill]) -> List[Bill]:
    out: List[Bill] = []
    for b in bills or []:
        month = safe_int(b.month, 0)
        if not 1 <= month <= 12:
            continue
        out.append(replace(b, month=month, consumption_kwh=_non_negative(b.consumption_kwh, 0.0)))
    return out


def sanitize_forecast_input(inp: ForecastInput) -> ForecastInput:
    regime = inp.regime if inp.regime in REGIMES else REGIME_NET_METERING
    return replace(
        inp,
        bills=sanitize_bills(inp.bills),
        regime=regime,
        system=sanitize_system_config(inp.system),
        battery=battery_for_regime(sanitize_battery_config(inp.battery), regime),
        roi=sanitize_roi_params(inp.roi),
        system_cost=_non_negative(inp.system_cost, 0.0),
        emission_factor_kg_per_kwh=_non_negative(inp.emission_factor_kg_per_kwh, emission_factor()),
    )
