"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .loans import parse_loans, validate_market_prices
from .models import Loan, MarketPrices, PriceScenario
from .scenarios import DEFAULT_SCENARIOS

logger = logging.getLogger(__name__)

PROVIDERS = ("static", "pyth")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssetsConfig:
    collateral: str = "XPM"
    debt: str = "XRP"


@dataclass(frozen=True)
class LendingConfig:
    liquidation_threshold: float = 65.0
    min_ltv: float = 20.0
    max_ltv: float = 50.0
    liquidation_fee: float = 10.0
    interest_rates: dict[int, float] = field(
        default_factory=lambda: {30: 19.0, 60: 16.0, 90: 15.0}
    )


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)
    timeout: int = 10


@dataclass(frozen=True)
class StaticPricesConfig:
    collateral_price_usd: float | None = None
    debt_asset_price_usd: float | None = None


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    static: StaticPricesConfig = field(default_factory=StaticPricesConfig)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    lending: LendingConfig = field(default_factory=LendingConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    loans: tuple[Loan, ...] = ()
    scenarios: tuple[PriceScenario, ...] = DEFAULT_SCENARIOS


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _build_assets(raw: dict[str, Any]) -> AssetsConfig:
    return AssetsConfig(
        collateral=str(raw.get("collateral", "XPM")).upper(),
        debt=str(raw.get("debt", "XRP")).upper(),
    )


def _build_lending(raw: dict[str, Any]) -> LendingConfig:
    rates_raw = raw.get("interest_rates")
    if rates_raw is None:
        rates = LendingConfig().interest_rates
    else:
        rates = {int(term): float(rate) for term, rate in rates_raw.items()}
    return LendingConfig(
        liquidation_threshold=float(raw.get("liquidation_threshold", 65.0)),
        min_ltv=float(raw.get("min_ltv", 20.0)),
        max_ltv=float(raw.get("max_ltv", 50.0)),
        liquidation_fee=float(raw.get("liquidation_fee", 10.0)),
        interest_rates=rates,
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    static_raw = raw.get("static", {}) or {}
    pyth_raw = raw.get("pyth", {}) or {}
    return PriceOracleConfig(
        provider=str(raw.get("provider", "static")).lower(),
        static=StaticPricesConfig(
            collateral_price_usd=_optional_float(static_raw.get("collateral_price_usd")),
            debt_asset_price_usd=_optional_float(static_raw.get("debt_asset_price_usd")),
        ),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds={str(k).upper(): v for k, v in (pyth_raw.get("feeds") or {}).items()},
            timeout=int(pyth_raw.get("timeout", 10)),
        ),
    )


def _build_scenarios(raw: list[dict[str, Any]] | None) -> tuple[PriceScenario, ...]:
    if raw is None:
        return DEFAULT_SCENARIOS
    return tuple(
        PriceScenario(
            name=str(item.get("name", "")),
            collateral_change_pct=float(item.get("collateral_change_pct", 0.0)),
            debt_asset_change_pct=float(item.get("debt_asset_change_pct", 0.0)),
        )
        for item in raw
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    lending = _build_lending(raw.get("lending", {}) or {})
    cfg = AppConfig(
        assets=_build_assets(raw.get("assets", {}) or {}),
        lending=lending,
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}) or {}),
        loans=parse_loans(raw.get("loans", []) or [], lending.liquidation_threshold),
        scenarios=_build_scenarios(raw.get("scenarios")),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s (%d loans)", config_path, len(cfg.loans))
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.assets.collateral == cfg.assets.debt:
        raise ValueError("Collateral and debt assets must differ")

    lending = cfg.lending
    if not 0 < lending.liquidation_threshold <= 100:
        raise ValueError("liquidation_threshold must be in (0, 100]")
    if not 0 < lending.min_ltv <= lending.max_ltv:
        raise ValueError("LTV limits must satisfy 0 < min_ltv <= max_ltv")
    if lending.max_ltv >= lending.liquidation_threshold:
        raise ValueError("max_ltv must be below liquidation_threshold")
    if lending.liquidation_fee < 0:
        raise ValueError("liquidation_fee must not be negative")
    if not lending.interest_rates:
        raise ValueError("At least one interest rate term must be configured")

    oracle = cfg.price_oracle
    if oracle.provider not in PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{oracle.provider}'")

    if oracle.provider == "static":
        if (
            oracle.static.collateral_price_usd is None
            or oracle.static.debt_asset_price_usd is None
        ):
            raise ValueError("Static price oracle needs both prices")
        validate_market_prices(
            MarketPrices(
                oracle.static.collateral_price_usd, oracle.static.debt_asset_price_usd
            )
        )

    if oracle.provider == "pyth":
        for symbol in (cfg.assets.collateral, cfg.assets.debt):
            if symbol not in oracle.pyth.feeds:
                raise ValueError(f"No Pyth feed configured for '{symbol}'")
            if not str(oracle.pyth.feeds[symbol] or "").strip():
                raise ValueError(
                    f"Pyth feed id for '{symbol}' is empty (is its env var set?)"
                )

    names = [scenario.name for scenario in cfg.scenarios]
    if any(not name for name in names):
        raise ValueError("Every scenario needs a name")
    if len(set(names)) != len(names):
        raise ValueError("Scenario names must be unique")
    for scenario in cfg.scenarios:
        for change in (scenario.collateral_change_pct, scenario.debt_asset_change_pct):
            if not math.isfinite(change) or change <= -100:
                raise ValueError(
                    f"Scenario '{scenario.name}' price change must be finite and > -100%"
                )
