# energy/seasonal.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from core.configuration import CONFIG_DIR, read_yaml

logger = logging.getLogger(__name__)

SEASONAL_FILE = "seasonal_factors.yaml"

MONTH_NAMES: List[str] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

DAYS_IN_MONTH: List[int] = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

SUMMER_MONTHS: Tuple[int, ...] = (5, 6, 7, 8, 9)


# ==========================================================
# Reference table (immutable)
# ==========================================================
@lru_cache(maxsize=1)
def load_seasonal_tables() -> Dict[str, Tuple[float, ...]]:
    doc = read_yaml(CONFIG_DIR / SEASONAL_FILE)
    cities = doc.get("cities") or {}

    out: Dict[str, Tuple[float, ...]] = {}
    for city, factors in cities.items():
        if not isinstance(factors, list) or len(factors) != 12:
            raise ValueError(f"{SEASONAL_FILE}: '{city}' must have 12 monthly factors")
        vals = tuple(float(f) for f in factors)
        if any(f <= 0 for f in vals):
            raise ValueError(f"{SEASONAL_FILE}: '{city}' factors must be > 0")
        out[str(city)] = vals
    return out


@lru_cache(maxsize=1)
def default_city() -> str:
    doc = read_yaml(CONFIG_DIR / SEASONAL_FILE)
    return str(doc.get("default_city") or "Dubai")


def city_names() -> List[str]:
    return list(load_seasonal_tables().keys())


def city_factors(city: Optional[str]) -> Tuple[float, ...]:
    """Raw multipliers (Jan..Dec). Unknown cities fall back to the default city."""
    tables = load_seasonal_tables()
    if city in tables:
        return tables[city]
    fallback = default_city()
    logger.warning("No seasonal factors for city %r, using %s", city, fallback)
    return tables[fallback]


def normalize_factors(factors: List[float]) -> List[float]:
    """Scale the 12 multipliers so that their yearly average is 1.0."""
    if len(factors) != 12:
        raise ValueError("seasonal factors must have 12 values")
    avg = sum(float(f) for f in factors) / 12.0
    if avg <= 0:
        return [1.0] * 12
    return [float(f) / avg for f in factors]


def normalized_city_factors(city: Optional[str]) -> List[float]:
    return normalize_factors(list(city_factors(city)))
