# Finance domain: net-metering credits, 25-year projection and environmental equivalence.
from __future__ import annotations

from .credit_ledger import CreditLedgerEntry, MonthSettlement, NetMeteringCreditLedger
from .environment import environmental_impact, lifetime_production
from .forecast import degradation_factor, neutral_summary, payback_period, run_forecast

__all__ = [
    "CreditLedgerEntry",
    "MonthSettlement",
    "NetMeteringCreditLedger",
    "environmental_impact",
    "lifetime_production",
    "degradation_factor",
    "neutral_summary",
    "payback_period",
    "run_forecast",
]
