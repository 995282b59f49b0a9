"""Pyth Network price oracle — one snapshot per call, no polling."""
import asyncio
import logging
import ssl

import aiohttp
import certifi

from ..config import AssetsConfig, PythConfig
from ..interfaces.price_oracle import PriceFeedError
from ..loans import validate_market_prices
from ..models import MarketPrices

logger = logging.getLogger(__name__)


def _normalize_feed_id(feed_id: str) -> str:
    """Hermes returns ids without the ``0x`` prefix; configs often include it."""
    feed_id = feed_id.lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def parse_hermes_prices(data: dict, feeds: dict[str, str]) -> dict[str, float]:
    """Map a Hermes ``latest`` payload to ``{symbol: usd_price}``.

    Price = price * 10^expo, per Pyth's fixed-point encoding.
    """
    id_to_assets: dict[str, list[str]] = {}
    for asset, feed_id in feeds.items():
        id_to_assets.setdefault(_normalize_feed_id(feed_id), []).append(asset)

    prices: dict[str, float] = {}
    for item in data.get("parsed", []):
        feed_id = _normalize_feed_id(str(item.get("id", "")))
        price_data = item.get("price", {})
        price_raw = int(price_data.get("price", 0))
        expo = int(price_data.get("expo", 0))

        price = price_raw * (10**expo)

        for asset in id_to_assets.get(feed_id, []):
            prices[asset] = price
    return prices


class PythOracle:
    """Fetch collateral and debt-asset USD prices from Pyth Hermes."""

    def __init__(self, config: PythConfig, assets: AssetsConfig) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout
        self.assets = assets
        self.price_feeds = {
            symbol: config.feeds[symbol] for symbol in (assets.collateral, assets.debt)
        }

    async def fetch_market_prices(self) -> MarketPrices:
        """Fetch current prices for both assets.

        Raises:
            PriceFeedError: HTTP or network failure, or a feed missing from
                the response. Partial snapshots are never returned.
        """
        feed_ids = sorted(set(self.price_feeds.values()))
        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(
                connector=connector, timeout=timeout
            ) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise PriceFeedError(
                            f"Error fetching prices from Pyth: HTTP {response.status}"
                        )
                    data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise PriceFeedError(f"Error fetching prices from Pyth: {e}") from e

        prices = parse_hermes_prices(data, self.price_feeds)
        missing = [s for s in self.price_feeds if s not in prices]
        if missing:
            raise PriceFeedError(f"Pyth response missing prices for {', '.join(missing)}")

        logger.info("Fetched prices from Pyth Network:")
        for asset, price in sorted(prices.items()):
            logger.info("  %s: $%.6f", asset, price)

        try:
            return validate_market_prices(
                MarketPrices(
                    collateral_price_usd=prices[self.assets.collateral],
                    debt_asset_price_usd=prices[self.assets.debt],
                )
            )
        except ValueError as e:
            raise PriceFeedError(f"Pyth returned unusable prices: {e}") from e
