"""Price oracle implementations."""
from ..config import AppConfig
from ..interfaces.price_oracle import PriceFeedError, PriceOracle
from ..models import MarketPrices
from .pyth import PythOracle
from .static import StaticOracle


def build_oracle(config: AppConfig) -> PriceOracle:
    """Instantiate the oracle selected by ``price_oracle.provider``."""
    oracle_cfg = config.price_oracle
    if oracle_cfg.provider == "pyth":
        return PythOracle(oracle_cfg.pyth, config.assets)
    if oracle_cfg.provider == "static":
        return StaticOracle(
            MarketPrices(
                collateral_price_usd=oracle_cfg.static.collateral_price_usd,
                debt_asset_price_usd=oracle_cfg.static.debt_asset_price_usd,
            )
        )
    raise ValueError(f"Unknown price oracle provider '{oracle_cfg.provider}'")


__all__ = ["PriceFeedError", "PythOracle", "StaticOracle", "build_oracle"]
