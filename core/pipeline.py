# core/pipeline.py
from __future__ import annotations

import copy
import dataclasses
import hashlib
import json
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from energy.seasonal import city_factors
from energy.sizing import size_system
from finance.environment import environmental_impact
from finance.forecast import run_forecast
from tariffs.validation import validate_tariff

from .bills import MonthlySeries, normalize_bills
from .models import (
    EnvironmentalImpact,
    FinancialSummary,
    ForecastInput,
    ForecastResult,
    SizingResult,
)
from .sanitize import sanitize_forecast_input

logger = logging.getLogger(__name__)


# ==========================================================
# Fingerprint
# ==========================================================
def _norm_value(x: Any) -> Any:
    if dataclasses.is_dataclass(x) and not isinstance(x, type):
        return _norm_value(dataclasses.asdict(x))
    if isinstance(x, dict):
        return {str(k): _norm_value(v) for k, v in sorted(x.items(), key=lambda kv: str(kv[0]))}
    if isinstance(x, (list, tuple)):
        return [_norm_value(v) for v in x]
    if isinstance(x, (str, int, float, bool)) or x is None:
        return x
    return str(x)


def fingerprint(*parts: Any) -> str:
    raw = json.dumps(_norm_value(list(parts)), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


# ==========================================================
# Stages
# ==========================================================
def _stage_consumption(inp: ForecastInput) -> MonthlySeries:
    return normalize_bills(inp.bills, city_factors(inp.city))


def _stage_sizing(
    inp: ForecastInput,
    consumption: MonthlySeries,
    geometry: Optional[Dict[str, Any]] = None,
) -> SizingResult:
    return size_system(
        consumption.consumption_kwh,
        inp.city,
        inp.regime,
        inp.system,
        inp.battery,
        geometry=geometry,
    )


def _stage_financial(inp: ForecastInput, consumption: MonthlySeries, sizing: SizingResult) -> FinancialSummary:
    return run_forecast(
        monthly_consumption_kwh=consumption.consumption_kwh,
        monthly_production_kwh=sizing.monthly_production_kwh,
        tariff=inp.tariff,
        regime=inp.regime,
        system=inp.system,
        battery=inp.battery,
        battery_capacity_kwh=sizing.battery_capacity_kwh,
        roi=inp.roi,
        system_cost=inp.system_cost,
    )


def _stage_environment(inp: ForecastInput, consumption: MonthlySeries, sizing: SizingResult) -> EnvironmentalImpact:
    # no load, no system
    annual = sizing.annual_production_kwh if sum(consumption.consumption_kwh) > 0 else 0.0
    return environmental_impact(annual, inp.roi, inp.emission_factor_kg_per_kwh)


def _collect_advisories(consumption: MonthlySeries, sizing: SizingResult) -> List[str]:
    out: List[str] = []
    if consumption.warning:
        out.append(consumption.warning)
    out.extend(sizing.advisories)
    return out


def _prepare(inp: ForecastInput) -> ForecastInput:
    clean = sanitize_forecast_input(inp)
    validate_tariff(clean.tariff)
    return clean


# ==========================================================
# Entrypoint
# ==========================================================
def compute_forecast(inp: ForecastInput, geometry: Optional[Dict[str, Any]] = None) -> ForecastResult:
    """
    Full run over one input snapshot: consumption -> sizing -> 25-year
    projection -> environmental impact.

    Raises InvalidTariffConfiguration when the tariff is malformed. Missing
    bills or a zero system cost give neutral financial figures.
    """
    clean = _prepare(inp)

    consumption = _stage_consumption(clean)
    sizing = _stage_sizing(clean, consumption, geometry)
    financial = _stage_financial(clean, consumption, sizing)
    environment = _stage_environment(clean, consumption, sizing)

    logger.debug(
        "Forecast: %d panels, %.2f kWp, payback %.2f y",
        sizing.panel_count,
        sizing.actual_system_size_kwp,
        financial.payback_period_years,
    )

    return ForecastResult(
        monthly_consumption_kwh=list(consumption.consumption_kwh),
        estimated_months=list(consumption.estimated_months),
        sizing=sizing,
        financial=financial,
        environment=environment,
        advisories=_collect_advisories(consumption, sizing),
    )


class ForecastPipeline:
    """
    Same stages as `compute_forecast`, with each stage output cached under the
    fingerprint of the inputs it reads. Changing only the system cost reuses
    the consumption and sizing stages. Each stage keeps at most `max_entries`
    outputs, least recently used first out.
    """

    def __init__(self, geometry: Optional[Dict[str, Any]] = None, max_entries: int = 32):
        self.geometry = dict(geometry) if geometry else None
        self.max_entries = max(1, int(max_entries))
        self._cache: Dict[str, "OrderedDict[str, Any]"] = {}
        self.hits = 0
        self.misses = 0

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def cache_size(self, stage: str) -> int:
        return len(self._cache.get(stage) or ())

    def _cached(self, stage: str, key: str, compute):
        """LRU per stage; callers always get a copy of the stored value."""
        entries = self._cache.setdefault(stage, OrderedDict())
        if key in entries:
            self.hits += 1
            entries.move_to_end(key)
            return copy.deepcopy(entries[key])
        self.misses += 1
        value = compute()
        entries[key] = copy.deepcopy(value)
        while len(entries) > self.max_entries:
            entries.popitem(last=False)
        return value

    def run(self, inp: ForecastInput) -> ForecastResult:
        clean = _prepare(inp)

        k_cons = fingerprint(clean.bills, clean.city)
        consumption = self._cached("consumption", k_cons, lambda: _stage_consumption(clean))

        k_size = fingerprint(k_cons, clean.regime, clean.system, clean.battery, self.geometry)
        sizing = self._cached("sizing", k_size, lambda: _stage_sizing(clean, consumption, self.geometry))

        k_fin = fingerprint(k_size, clean.tariff, clean.roi, clean.system_cost)
        financial = self._cached("financial", k_fin, lambda: _stage_financial(clean, consumption, sizing))

        k_env = fingerprint(k_size, clean.roi, clean.emission_factor_kg_per_kwh)
        environment = self._cached("environment", k_env, lambda: _stage_environment(clean, consumption, sizing))

        logger.debug("ForecastPipeline: hits=%d misses=%d", self.hits, self.misses)

        return ForecastResult(
            monthly_consumption_kwh=list(consumption.consumption_kwh),
            estimated_months=list(consumption.estimated_months),
            sizing=sizing,
            financial=financial,
            environment=environment,
            advisories=_collect_advisories(consumption, sizing),
        )
