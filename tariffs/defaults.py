# tariffs/defaults.py
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

from core.configuration import CONFIG_DIR, read_yaml
from core.models import REGIME_NET_METERING, REGIMES, TariffConfig, TariffTier

TARIFFS_FILE = "tariffs.yaml"


@lru_cache(maxsize=1)
def _tariffs_doc() -> Dict[str, Any]:
    return read_yaml(CONFIG_DIR / TARIFFS_FILE)


def _utilities() -> Dict[str, Any]:
    return dict(_tariffs_doc().get("utilities") or {})


def _tier_from_dict(d: Dict[str, Any]) -> TariffTier:
    to = d.get("to_kwh")
    return TariffTier(
        from_kwh=float(d["from_kwh"]),
        to_kwh=None if to is None else float(to),
        rate_per_kwh=float(d["rate_per_kwh"]),
    )


def utility_names() -> List[str]:
    return list(_utilities().keys())


def default_utility() -> str:
    return str(_tariffs_doc().get("default_utility") or "DEWA")


def _utility_entry(utility: Optional[str]) -> Dict[str, Any]:
    utilities = _utilities()
    name = utility if utility in utilities else default_utility()
    entry = utilities.get(name)
    if not isinstance(entry, dict):
        raise ValueError(f"Utility without tariff in {TARIFFS_FILE}: {name}")
    return entry


def default_tariff(utility: Optional[str] = None) -> TariffConfig:
    e = _utility_entry(utility)
    return TariffConfig(
        tiers=[_tier_from_dict(t) for t in (e.get("tiers") or [])],
        fuel_surcharge_per_kwh=float(e.get("fuel_surcharge_per_kwh", 0.0)),
        fixed_monthly_charge=float(e.get("fixed_monthly_charge", 0.0)),
    )


def regime_for_utility(utility: Optional[str] = None) -> str:
    regime = str(_utility_entry(utility).get("regime") or REGIME_NET_METERING)
    return regime if regime in REGIMES else REGIME_NET_METERING
