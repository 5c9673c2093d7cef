"""Pyth Network price oracle — prices returned as 1e18 fixed-point ints."""
import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..fixed_point import format_fixed

logger = logging.getLogger(__name__)

PRICE_DECIMALS = 18


def scale_price(price_raw: int, expo: int) -> int:
    """Rescale a Pyth ``price * 10^expo`` pair to 1e18 precision (floor)."""
    shift = PRICE_DECIMALS + expo
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10**(-shift)


class PythOracle:
    """Fetch collateral/borrow prices from the Pyth Hermes API."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Fetch current prices keyed by configured feed name.

        Args:
            symbols: Optional list of feed names (e.g. ``["collateral"]``).
                     If None, fetches all configured feeds.
        """
        prices: dict[str, int] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()

            id_to_names: dict[str, list[str]] = {}
            for name, feed_id in feeds.items():
                id_to_names.setdefault(feed_id.lower().removeprefix("0x"), []).append(name)

            for item in data.get("parsed", []):
                feed_id = str(item.get("id", "")).lower().removeprefix("0x")
                price_data = item.get("price", {})
                price = scale_price(
                    int(price_data.get("price", 0)), int(price_data.get("expo", 0))
                )
                if price <= 0:
                    logger.warning("Ignoring non-positive Pyth price for feed %s", feed_id)
                    continue
                for name in id_to_names.get(feed_id, []):
                    prices[name] = price

            for name, price in sorted(prices.items()):
                logger.info("  %s: $%s", name, format_fixed(price))

        except (aiohttp.ClientError, ValueError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return prices
