# finance/environment.py
from __future__ import annotations

from typing import Optional

from core.configuration import emission_factor
from core.models import EnvironmentalImpact, RoiParams
from .forecast import degradation_factor

# Published equivalence constants
CO2_PER_TREE_YEAR_KG = 21.0                 # one mature tree, one year
CO2_PER_CAR_YEAR_TONNES = 4.6               # typical passenger car, one year
CO2_PER_CAR_KM_KG = 0.192                   # average passenger car


def lifetime_production(annual_production_kwh: float, roi: RoiParams) -> float:
    annual = max(0.0, float(annual_production_kwh))
    return sum(annual * degradation_factor(y, roi) for y in range(1, int(roi.horizon_years) + 1))


def environmental_impact(
    annual_production_kwh: float,
    roi: RoiParams,
    emission_factor_kg_per_kwh: Optional[float] = None,
) -> EnvironmentalImpact:
    """`emission_factor_kg_per_kwh` defaults to the configured grid factor."""
    if emission_factor_kg_per_kwh is None:
        emission_factor_kg_per_kwh = emission_factor()
    factor = max(0.0, float(emission_factor_kg_per_kwh))
    years = max(1, int(roi.horizon_years))

    lifetime_kwh = lifetime_production(annual_production_kwh, roi)
    co2_kg = lifetime_kwh * factor
    co2_t = co2_kg / 1000.0

    return EnvironmentalImpact(
        lifetime_production_kwh=lifetime_kwh,
        first_year_co2_kg=max(0.0, float(annual_production_kwh)) * degradation_factor(1, roi) * factor,
        co2_saved_tonnes=co2_t,
        trees_equivalent=co2_kg / (CO2_PER_TREE_YEAR_KG * years),
        cars_off_road_equivalent=co2_t / (CO2_PER_CAR_YEAR_TONNES * years),
        car_km_avoided=co2_kg / CO2_PER_CAR_KM_KG,
    )
