# Energy domain: seasonal reference data, PV production, sizing and battery dispatch.
from __future__ import annotations

from .battery import DispatchResult, dispatch_day, dispatch_month
from .production import ProductionResult, monthly_production, simulate_production, total_efficiency_factor
from .seasonal import DAYS_IN_MONTH, MONTH_NAMES, city_factors, normalize_factors, normalized_city_factors
from .sizing import area_per_panel, battery_capacity_for, size_system, target_annual_production

__all__ = [
    # Seasonal
    "DAYS_IN_MONTH",
    "MONTH_NAMES",
    "city_factors",
    "normalize_factors",
    "normalized_city_factors",
    # Production
    "ProductionResult",
    "monthly_production",
    "simulate_production",
    "total_efficiency_factor",
    # Sizing
    "area_per_panel",
    "battery_capacity_for",
    "size_system",
    "target_annual_production",
    # Battery
    "DispatchResult",
    "dispatch_day",
    "dispatch_month",
]
