"""Fixed prices from config or the command line."""
import logging

from ..loans import validate_market_prices
from ..models import MarketPrices

logger = logging.getLogger(__name__)


class StaticOracle:
    """Serve the same validated snapshot on every call."""

    def __init__(self, prices: MarketPrices) -> None:
        self._prices = validate_market_prices(prices)

    async def fetch_market_prices(self) -> MarketPrices:
        logger.debug(
            "Using static prices: collateral $%.6f, debt asset $%.6f",
            self._prices.collateral_price_usd,
            self._prices.debt_asset_price_usd,
        )
        return self._prices
