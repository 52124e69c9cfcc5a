# core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .configuration import base_configuration


# ==========================================================
# Domain constants
# ==========================================================
REGIME_NET_METERING = "net_metering"          # regime A: exports banked as kWh credits
REGIME_SELF_CONSUMPTION = "self_consumption"  # regime B: excess lost without storage
REGIMES = (REGIME_NET_METERING, REGIME_SELF_CONSUMPTION)

BATTERY_NIGHT_BACKUP = "night_backup"
BATTERY_STORE_UNUSED = "store_unused"
BATTERY_MODES = (BATTERY_NIGHT_BACKUP, BATTERY_STORE_UNUSED)

ORIENTATION_PORTRAIT = "portrait"
ORIENTATION_LANDSCAPE = "landscape"
ORIENTATIONS = (ORIENTATION_PORTRAIT, ORIENTATION_LANDSCAPE)

MONTHS_PER_YEAR = 12
# Record defaults are read from config/technical.yaml and config/financial.yaml.
_TECHNICAL = base_configuration().technical
_BATTERY = base_configuration().battery
_FINANCIAL = base_configuration().financial

DEFAULT_HORIZON_YEARS = int(_FINANCIAL["horizon_years"])


# =============================
# Consumption
# =============================

@dataclass(frozen=True)
class Bill:
    month: int                        # 1..12
    consumption_kwh: float
    is_estimated: bool = False


# =============================
# Tariff
# =============================

@dataclass(frozen=True)
class TariffTier:
    from_kwh: float
    to_kwh: Optional[float]           # None = unbounded (last tier)
    rate_per_kwh: float

    @property
    def is_unbounded(self) -> bool:
        return self.to_kwh is None


@dataclass(frozen=True)
class TariffConfig:
    tiers: List[TariffTier]
    fuel_surcharge_per_kwh: float = 0.0
    fixed_monthly_charge: float = 0.0


@dataclass(frozen=True)
class Escalation:
    """Year of the simulation and how tariff rates have grown by then."""

    year: int = 1
    rate: float = 0.0
    escalate_fuel_surcharge: bool = False


# =============================
# PV system / battery
# =============================

@dataclass(frozen=True)
class SystemConfig:
    peak_sun_hours: float = float(_TECHNICAL["peak_sun_hours"])
    panel_wattage_w: float = float(_TECHNICAL["panel_wattage_w"])
    component_efficiency: float = float(_TECHNICAL["component_efficiency"])
    environmental_loss_factor: float = float(_TECHNICAL["environmental_loss_factor"])
    bifacial_enabled: bool = bool(_TECHNICAL["bifacial_enabled"])
    bifacial_boost: float = float(_TECHNICAL["bifacial_boost"])
    inverter_sizing_ratio: float = float(_TECHNICAL["inverter_sizing_ratio"])
    panel_orientation: str = str(_TECHNICAL["panel_orientation"])
    available_area_m2: float = float(_TECHNICAL["available_area_m2"])
    daytime_consumption_fraction: float = float(_TECHNICAL["daytime_consumption_fraction"])  # 0..1 share of load during daylight


@dataclass(frozen=True)
class BatteryConfig:
    enabled: bool = bool(_BATTERY["enabled"])
    mode: str = str(_BATTERY["mode"])
    usable_depth_of_discharge: float = float(_BATTERY["usable_depth_of_discharge"])
    round_trip_efficiency: float = float(_BATTERY["round_trip_efficiency"])
    capacity_kwh: Optional[float] = None         # fixed capacity; None = sized by the advisor


@dataclass(frozen=True)
class RoiParams:
    first_year_degradation: float = float(_FINANCIAL["first_year_degradation"])
    annual_degradation_rate: float = float(_FINANCIAL["annual_degradation_rate"])
    annual_escalation_rate: float = float(_FINANCIAL["annual_escalation_rate"])
    escalate_fuel_surcharge: bool = bool(_FINANCIAL["escalate_fuel_surcharge"])
    credit_expiry_months: int = int(_FINANCIAL["credit_expiry_months"])
    same_month_credit: bool = bool(_FINANCIAL["same_month_credit"])      # export of month M offsets M's own deficit
    maintenance_cost_pct: float = float(_FINANCIAL["maintenance_cost_pct"])  # annual O&M as a fraction of system cost
    horizon_years: int = DEFAULT_HORIZON_YEARS


# =============================
# Sizing
# =============================

@dataclass(frozen=True)
class SizingResult:
    panel_count: int
    actual_system_size_kwp: float
    inverter_capacity_kw: float
    area_required_m2: float
    monthly_production_kwh: List[float]
    annual_production_kwh: float
    battery_capacity_kwh: float

    ideal_size_kwp: float = 0.0
    target_annual_kwh: float = 0.0
    clipping_loss_kwh: float = 0.0
    unused_solar_kwh: float = 0.0
    exceeds_available_area: bool = False
    advisories: List[str] = field(default_factory=list)


# =============================
# Finance
# =============================

@dataclass(frozen=True)
class YearlyResult:
    year: int
    degradation_factor: float
    savings_aed: float
    cash_flow_aed: float
    cumulative_cash_flow_aed: float

    production_kwh: float = 0.0
    original_bill_aed: float = 0.0
    offset_bill_aed: float = 0.0
    maintenance_aed: float = 0.0

    # net metering (regime A)
    direct_use_kwh: float = 0.0
    credits_stored_kwh: float = 0.0
    credits_drawn_kwh: float = 0.0
    credits_expired_kwh: float = 0.0
    rollover_kwh: float = 0.0
    rollover_value_aed: float = 0.0

    # self consumption (regime B)
    battery_discharged_kwh: float = 0.0
    unused_solar_kwh: float = 0.0


@dataclass(frozen=True)
class FinancialSummary:
    first_year_savings: float
    payback_period_years: float                  # 0 = not reached within the horizon
    net_profit_25yr: float
    net_value_25yr: float
    roi_percent: float
    bill_offset_percent: float
    yearly_breakdown: List[YearlyResult]

    first_year_original_bill: float = 0.0
    first_year_monthly_savings: List[float] = field(default_factory=lambda: [0.0] * MONTHS_PER_YEAR)

    @property
    def payback_reached(self) -> bool:
        return self.payback_period_years > 0


@dataclass(frozen=True)
class EnvironmentalImpact:
    lifetime_production_kwh: float
    first_year_co2_kg: float
    co2_saved_tonnes: float
    trees_equivalent: float
    cars_off_road_equivalent: float
    car_km_avoided: float


# =============================
# Input / output snapshot
# =============================

@dataclass(frozen=True)
class ForecastInput:
    bills: List[Bill]
    tariff: TariffConfig
    city: str = "Dubai"
    regime: str = REGIME_NET_METERING
    system: SystemConfig = field(default_factory=SystemConfig)
    battery: BatteryConfig = field(default_factory=BatteryConfig)
    roi: RoiParams = field(default_factory=RoiParams)
    system_cost: float = 0.0
    emission_factor_kg_per_kwh: float = float(_FINANCIAL["emission_factor_kg_per_kwh"])


@dataclass(frozen=True)
class ForecastResult:
    monthly_consumption_kwh: List[float]
    estimated_months: List[int]
    sizing: SizingResult
    financial: FinancialSummary
    environment: EnvironmentalImpact
    advisories: List[str] = field(default_factory=list)

    @property
    def annual_consumption_kwh(self) -> float:
        return float(sum(self.monthly_consumption_kwh))
