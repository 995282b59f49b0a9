"""Price oracle protocol — price snapshot abstraction."""
from typing import Protocol

from ..models import MarketPrices


class PriceFeedError(RuntimeError):
    """A complete, fresh price snapshot could not be obtained."""


class PriceOracle(Protocol):
    """Abstract interface for fetching one collateral/debt price snapshot."""

    async def fetch_market_prices(self) -> MarketPrices: ...
