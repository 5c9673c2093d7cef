"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .fixed_point import PRECISE_UNIT, to_fixed
from .models import ExecutionParameters, IncentiveParameters, MarketKind, Methodology

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrategyConfig:
    methodology: Methodology
    execution: ExecutionParameters
    incentive: IncentiveParameters
    market: MarketKind = MarketKind.AAVE


@dataclass(frozen=True)
class PositionConfig:
    snapshot_path: str = "snapshot.yaml"


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "none"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    strategy: StrategyConfig
    position: PositionConfig = field(default_factory=PositionConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    watch_interval_minutes: int = 15


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


def _fixed(raw: dict[str, Any], key: str, default: str | None = None) -> int:
    """Read a decimal config value as a 1e18 fixed-point int."""
    value = raw.get(key, default)
    if value is None:
        raise ValueError(f"Missing required setting '{key}'")
    if isinstance(value, float):
        value = str(value)
    return to_fixed(value)


def _build_methodology(raw: dict[str, Any]) -> Methodology:
    return Methodology(
        target_leverage_ratio=_fixed(raw, "target_leverage_ratio"),
        min_leverage_ratio=_fixed(raw, "min_leverage_ratio"),
        max_leverage_ratio=_fixed(raw, "max_leverage_ratio"),
        recentering_speed=_fixed(raw, "recentering_speed"),
        rebalance_interval=int(raw.get("rebalance_interval", 86400)),
    )


def _build_execution(raw: dict[str, Any]) -> ExecutionParameters:
    return ExecutionParameters(
        unutilized_leverage_percentage=_fixed(raw, "unutilized_leverage_percentage", "0.01"),
        slippage_tolerance=_fixed(raw, "slippage_tolerance", "0.01"),
        twap_max_trade_size=_fixed(raw, "twap_max_trade_size"),
        twap_cooldown_period=int(raw.get("twap_cooldown_period", 0)),
    )


def _build_incentive(raw: dict[str, Any]) -> IncentiveParameters:
    return IncentiveParameters(
        incentivized_leverage_ratio=_fixed(raw, "incentivized_leverage_ratio"),
        incentivized_slippage_tolerance=_fixed(raw, "incentivized_slippage_tolerance", "0.05"),
        incentivized_twap_max_trade_size=_fixed(raw, "incentivized_twap_max_trade_size"),
        incentivized_twap_cooldown_period=int(raw.get("incentivized_twap_cooldown_period", 0)),
    )


def _build_strategy(raw: dict[str, Any]) -> StrategyConfig:
    market = raw.get("market", MarketKind.AAVE.value)
    try:
        market_kind = MarketKind(market)
    except ValueError:
        raise ValueError(f"Unknown market '{market}'") from None
    return StrategyConfig(
        methodology=_build_methodology(raw.get("methodology", {})),
        execution=_build_execution(raw.get("execution", {})),
        incentive=_build_incentive(raw.get("incentive", {})),
        market=market_kind,
    )


def _build_position(raw: dict[str, Any]) -> PositionConfig:
    return PositionConfig(snapshot_path=raw.get("snapshot_path", "snapshot.yaml"))


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "none"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
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

    if "strategy" not in raw:
        raise ValueError("A 'strategy' section must be configured")

    cfg = AppConfig(
        strategy=_build_strategy(raw["strategy"]),
        position=_build_position(raw.get("position", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
        watch_interval_minutes=int(raw.get("watch_interval_minutes", 15)),
    )

    validate_strategy(cfg.strategy)
    if cfg.price_oracle.provider not in ("none", "pyth"):
        raise ValueError(f"Unknown price oracle provider '{cfg.price_oracle.provider}'")
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def validate_strategy(strategy: StrategyConfig) -> None:
    """Raise on settings the calculators assume are already valid."""
    m = strategy.methodology
    e = strategy.execution
    i = strategy.incentive

    if m.min_leverage_ratio <= 0:
        raise ValueError("Min leverage ratio must be > 0")
    if m.min_leverage_ratio > m.target_leverage_ratio:
        raise ValueError("Target leverage ratio must be >= min leverage ratio")
    if m.target_leverage_ratio > m.max_leverage_ratio:
        raise ValueError("Target leverage ratio must be <= max leverage ratio")
    if not 0 < m.recentering_speed <= PRECISE_UNIT:
        raise ValueError("Must be valid recentering speed")
    if e.unutilized_leverage_percentage >= PRECISE_UNIT:
        raise ValueError("Unutilized leverage must be <100%")
    if e.slippage_tolerance >= PRECISE_UNIT:
        raise ValueError("Slippage tolerance must be <100%")
    if i.incentivized_slippage_tolerance >= PRECISE_UNIT:
        raise ValueError("Incentivized slippage tolerance must be <100%")
    if i.incentivized_leverage_ratio <= m.max_leverage_ratio:
        raise ValueError("Incentivized leverage ratio must be > max leverage ratio")
    if m.rebalance_interval < e.twap_cooldown_period:
        raise ValueError("Rebalance interval must be greater than TWAP cooldown period")
    if e.twap_cooldown_period < i.incentivized_twap_cooldown_period:
        raise ValueError("TWAP cooldown must be greater than incentivized TWAP cooldown")
    if e.twap_max_trade_size == 0:
        raise ValueError("Max TWAP trade size must not be 0")
    if i.incentivized_twap_max_trade_size < e.twap_max_trade_size:
        raise ValueError("Incentivized max TWAP trade size must be >= max TWAP trade size")
