# core/tables.py
from __future__ import annotations

from dataclasses import asdict

import pandas as pd

from energy.seasonal import MONTH_NAMES

from .models import FinancialSummary, ForecastResult


YEARLY_COLUMNS = [
    "year",
    "degradation_factor",
    "production_kwh",
    "original_bill_aed",
    "offset_bill_aed",
    "savings_aed",
    "maintenance_aed",
    "cash_flow_aed",
    "cumulative_cash_flow_aed",
    "direct_use_kwh",
    "credits_stored_kwh",
    "credits_drawn_kwh",
    "credits_expired_kwh",
    "rollover_kwh",
    "rollover_value_aed",
    "battery_discharged_kwh",
    "unused_solar_kwh",
]


def yearly_breakdown_frame(summary: FinancialSummary) -> pd.DataFrame:
    """One row per projected year, indexed by year."""
    rows = [asdict(r) for r in summary.yearly_breakdown]
    df = pd.DataFrame(rows, columns=YEARLY_COLUMNS)
    return df.set_index("year")


def monthly_overview_frame(result: ForecastResult) -> pd.DataFrame:
    """First-year month by month view: load, undegraded production and savings."""
    consumption = list(result.monthly_consumption_kwh)
    production = list(result.sizing.monthly_production_kwh)
    savings = list(result.financial.first_year_monthly_savings)
    estimated = set(result.estimated_months)

    df = pd.DataFrame(
        {
            "month": list(MONTH_NAMES),
            "consumption_kwh": consumption,
            "production_kwh": production,
            "net_kwh": [c - p for c, p in zip(consumption, production)],
            "savings_aed": savings,
            "estimated": [m in estimated for m in range(1, 13)],
        }
    )
    df.index = pd.RangeIndex(1, 13, name="month_number")
    return df
