# core/configuration.py
from __future__ import annotations

import copy
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import yaml

BASE_DIR = Path(__file__).resolve().parents[1]
CONFIG_DIR = BASE_DIR / "config"

TECHNICAL_FILE = "technical.yaml"
FINANCIAL_FILE = "financial.yaml"

# Keys the record defaults are built from; the shipped YAML must carry all of them.
REQUIRED_TECHNICAL: Tuple[str, ...] = (
    "peak_sun_hours",
    "panel_wattage_w",
    "component_efficiency",
    "environmental_loss_factor",
    "bifacial_enabled",
    "bifacial_boost",
    "inverter_sizing_ratio",
    "panel_orientation",
    "available_area_m2",
    "daytime_consumption_fraction",
    "panel",
    "battery",
)
REQUIRED_PANEL: Tuple[str, ...] = ("length_m", "width_m", "spacing_factor")
REQUIRED_BATTERY: Tuple[str, ...] = (
    "enabled",
    "mode",
    "usable_depth_of_discharge",
    "round_trip_efficiency",
)
REQUIRED_FINANCIAL: Tuple[str, ...] = (
    "horizon_years",
    "first_year_degradation",
    "annual_degradation_rate",
    "annual_escalation_rate",
    "escalate_fuel_surcharge",
    "credit_expiry_months",
    "same_month_credit",
    "maintenance_cost_pct",
    "emission_factor_kg_per_kwh",
)


def read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config (must be a mapping): {path}")
    return data


# ==========================================================
# Engine configuration
# ==========================================================
@dataclass(frozen=True)
class EngineConfig:
    technical: Dict[str, Any]
    financial: Dict[str, Any]

    @property
    def battery(self) -> Dict[str, Any]:
        return dict(self.technical.get("battery") or {})

    @property
    def panel_geometry(self) -> Dict[str, Any]:
        return copy.deepcopy(self.technical.get("panel") or {})

    @property
    def emission_factor(self) -> float:
        return float(self.financial["emission_factor_kg_per_kwh"])


def _missing(section: Dict[str, Any], keys: Tuple[str, ...], where: str) -> List[str]:
    return [f"{where}: {k}" for k in keys if section.get(k) is None]


def check_complete(cfg: EngineConfig) -> None:
    """Raise ValueError naming every default the configuration does not define."""
    problems = _missing(cfg.technical, REQUIRED_TECHNICAL, TECHNICAL_FILE)
    problems += _missing(cfg.technical.get("panel") or {}, REQUIRED_PANEL, f"{TECHNICAL_FILE} panel")
    problems += _missing(cfg.battery, REQUIRED_BATTERY, f"{TECHNICAL_FILE} battery")
    problems += _missing(cfg.financial, REQUIRED_FINANCIAL, FINANCIAL_FILE)
    if problems:
        raise ValueError("Incomplete configuration: " + ", ".join(problems))


def load_configuration(config_dir: Optional[Path] = None) -> EngineConfig:
    base = Path(config_dir) if config_dir else CONFIG_DIR
    technical = read_yaml(base / TECHNICAL_FILE)
    financial = read_yaml(base / FINANCIAL_FILE)
    return EngineConfig(technical=technical, financial=financial)


@lru_cache(maxsize=1)
def base_configuration() -> EngineConfig:
    """The shipped configuration; every record default comes from here."""
    cfg = load_configuration()
    check_complete(cfg)
    return cfg


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (overrides or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def effective_configuration(cfg_base: EngineConfig, overrides: Optional[dict]) -> EngineConfig:
    """Overrides merge into nested sections (`battery`, `panel`) key by key."""
    if not overrides:
        return cfg_base
    return EngineConfig(
        technical=deep_merge(cfg_base.technical, overrides.get("technical") or {}),
        financial=deep_merge(cfg_base.financial, overrides.get("financial") or {}),
    )


# ==========================================================
# Config -> records
# ==========================================================
def _coerce(value: Any, like: Any) -> Any:
    if isinstance(like, bool):
        return bool(value)
    if isinstance(like, int):
        return int(value)
    if isinstance(like, float):
        return float(value)
    if isinstance(like, str):
        return str(value)
    return value


def _record_from(cls, section: Dict[str, Any]):
    """Record defaults overlaid with the section keys that name its fields."""
    base = cls()
    kw = {
        f.name: _coerce(section[f.name], getattr(base, f.name))
        for f in fields(cls)
        if section.get(f.name) is not None
    }
    return replace(base, **kw)


def default_system_config(cfg: Optional[EngineConfig] = None):
    from .models import SystemConfig

    return _record_from(SystemConfig, (cfg or base_configuration()).technical)


def default_battery_config(cfg: Optional[EngineConfig] = None):
    from .models import BatteryConfig

    return _record_from(BatteryConfig, (cfg or base_configuration()).battery)


def default_roi_params(cfg: Optional[EngineConfig] = None):
    from .models import RoiParams

    return _record_from(RoiParams, (cfg or base_configuration()).financial)


def panel_geometry(cfg: Optional[EngineConfig] = None) -> Dict[str, Any]:
    """Panel footprint; keys missing from `cfg` come from the shipped configuration."""
    base = base_configuration().panel_geometry
    if cfg is None:
        return base
    return deep_merge(base, cfg.panel_geometry)


def emission_factor(cfg: Optional[EngineConfig] = None) -> float:
    c = cfg or base_configuration()
    return float(c.financial.get("emission_factor_kg_per_kwh", base_configuration().emission_factor))
