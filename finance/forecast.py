# finance/forecast.py
from __future__ import annotations

import logging
from typing import Dict, List

from core.models import (
    MONTHS_PER_YEAR,
    REGIME_NET_METERING,
    BatteryConfig,
    Escalation,
    FinancialSummary,
    RoiParams,
    SystemConfig,
    TariffConfig,
    YearlyResult,
)
from energy.battery import dispatch_month
from energy.seasonal import DAYS_IN_MONTH
from tariffs.engine import bill_amount
from .credit_ledger import NetMeteringCreditLedger

logger = logging.getLogger(__name__)


# ==========================================================
# Base financial utilities
# ==========================================================
def degradation_factor(year: int, roi: RoiParams) -> float:
    return (1.0 - float(roi.first_year_degradation)) * (1.0 - float(roi.annual_degradation_rate)) ** (int(year) - 1)


def payback_period(system_cost: float, cash_flows: List[float]) -> float:
    """
    Fractional years until the cumulative cash flow (starting at -cost) first
    reaches zero. 0.0 when it never does within the given flows.
    """
    cumulative = -float(system_cost)
    for year, cf in enumerate(cash_flows, start=1):
        previous = cumulative
        cumulative += cf
        if cumulative >= 0:
            frac = (0.0 - previous) / cf if cf > 0 else 0.0
            return (year - 1) + frac
    return 0.0


def _pct(num: float, den: float) -> float:
    return (float(num) / float(den) * 100.0) if den > 0 else 0.0


def neutral_summary(roi: RoiParams) -> FinancialSummary:
    """The "no data yet" result: every figure zero, one row per year."""
    rows = [
        YearlyResult(
            year=y,
            degradation_factor=degradation_factor(y, roi),
            savings_aed=0.0,
            cash_flow_aed=0.0,
            cumulative_cash_flow_aed=0.0,
        )
        for y in range(1, int(roi.horizon_years) + 1)
    ]
    return FinancialSummary(
        first_year_savings=0.0,
        payback_period_years=0.0,
        net_profit_25yr=0.0,
        net_value_25yr=0.0,
        roi_percent=0.0,
        bill_offset_percent=0.0,
        yearly_breakdown=rows,
    )


# ==========================================================
# Projection
# ==========================================================
def run_forecast(
    *,
    monthly_consumption_kwh: List[float],
    monthly_production_kwh: List[float],
    tariff: TariffConfig,
    regime: str,
    system: SystemConfig,
    battery: BatteryConfig,
    battery_capacity_kwh: float,
    roi: RoiParams,
    system_cost: float,
) -> FinancialSummary:
    """
    Year-major, month-minor simulation over `roi.horizon_years`.

    `monthly_production_kwh` is the undegraded output of the array; each year
    scales it by `degradation_factor(year)`.
    """
    if len(monthly_consumption_kwh) != MONTHS_PER_YEAR or len(monthly_production_kwh) != MONTHS_PER_YEAR:
        raise ValueError("consumption and production must have 12 monthly values")

    cost = float(system_cost)
    if sum(monthly_consumption_kwh) <= 0 or cost <= 0 or sum(monthly_production_kwh) <= 0:
        logger.debug("Degenerate forecast input, returning neutral summary")
        return neutral_summary(roi)

    day_frac = max(0.0, min(1.0, float(system.daytime_consumption_fraction)))
    maintenance = float(roi.maintenance_cost_pct) * cost
    ledger = NetMeteringCreditLedger(roi.credit_expiry_months, roi.same_month_credit)
    net_metering = regime == REGIME_NET_METERING

    rows: List[YearlyResult] = []
    cumulative = -cost
    first_year_savings = 0.0
    first_year_original = 0.0
    first_year_monthly: List[float] = []

    for year in range(1, int(roi.horizon_years) + 1):
        f_deg = degradation_factor(year, roi)
        esc = Escalation(
            year=year,
            rate=roi.annual_escalation_rate,
            escalate_fuel_surcharge=roi.escalate_fuel_surcharge,
        )
        acc: Dict[str, float] = dict.fromkeys(
            (
                "production", "original", "offset", "direct", "stored", "drawn",
                "expired", "discharged", "unused",
            ),
            0.0,
        )
        month_savings: List[float] = []

        for m in range(MONTHS_PER_YEAR):
            consumption = float(monthly_consumption_kwh[m])
            day = consumption * day_frac
            night = consumption - day
            production = float(monthly_production_kwh[m]) * f_deg

            original = bill_amount(consumption, tariff, esc)

            if net_metering:
                s = ledger.settle_month((year - 1) * MONTHS_PER_YEAR + m, production, day, night)
                offset = bill_amount(s.residual_deficit_kwh, tariff, esc)
                acc["direct"] += s.self_consumed_kwh
                acc["stored"] += s.exported_kwh
                acc["drawn"] += s.drawn_kwh
                acc["expired"] += s.expired_kwh
            else:
                d = dispatch_month(production, day, night, DAYS_IN_MONTH[m], battery_capacity_kwh, battery)
                offset = bill_amount(max(0.0, consumption - d.saved_kwh), tariff, esc)
                acc["direct"] += d.direct_use_kwh
                acc["discharged"] += d.discharged_kwh
                acc["unused"] += d.spilled_kwh

            acc["production"] += production
            acc["original"] += original
            acc["offset"] += offset
            month_savings.append(original - offset)

        savings = acc["original"] - acc["offset"]
        cash_flow = savings - maintenance
        cumulative += cash_flow

        rows.append(
            YearlyResult(
                year=year,
                degradation_factor=f_deg,
                savings_aed=savings,
                cash_flow_aed=cash_flow,
                cumulative_cash_flow_aed=cumulative,
                production_kwh=acc["production"],
                original_bill_aed=acc["original"],
                offset_bill_aed=acc["offset"],
                maintenance_aed=maintenance,
                direct_use_kwh=acc["direct"],
                credits_stored_kwh=acc["stored"],
                credits_drawn_kwh=acc["drawn"],
                credits_expired_kwh=acc["expired"],
                rollover_kwh=ledger.total_kwh if net_metering else 0.0,
                rollover_value_aed=ledger.rollover_value(tariff, esc) if net_metering else 0.0,
                battery_discharged_kwh=acc["discharged"],
                unused_solar_kwh=acc["unused"],
            )
        )

        if year == 1:
            first_year_savings = savings
            first_year_original = acc["original"]
            first_year_monthly = month_savings

    return FinancialSummary(
        first_year_savings=first_year_savings,
        payback_period_years=payback_period(cost, [r.cash_flow_aed for r in rows]),
        net_profit_25yr=cumulative,
        net_value_25yr=cumulative + cost,
        roi_percent=_pct(cumulative, cost),
        bill_offset_percent=_pct(first_year_savings, first_year_original),
        yearly_breakdown=rows,
        first_year_original_bill=first_year_original,
        first_year_monthly_savings=first_year_monthly,
    )
