from .engine import (
    bill_amount,
    bill_breakdown,
    escalation_factor,
    marginal_rate,
    top_tier_rate,
)
from .defaults import default_tariff, regime_for_utility
from .validation import ensure_valid_tariff, tariff_problems, validate_tariff

__all__ = [
    "bill_amount",
    "bill_breakdown",
    "escalation_factor",
    "marginal_rate",
    "top_tier_rate",
    "default_tariff",
    "regime_for_utility",
    "ensure_valid_tariff",
    "tariff_problems",
    "validate_tariff",
]
