"""
Historical price lookup for non-stable currencies.

Sales paid in LUNA are converted to UST through a PriceOracle. Two
implementations are provided: CoinGeckoPriceOracle queries the CoinGecko
market_chart/range API, FixedPriceOracle returns constant prices.
"""

import logging
from decimal import Decimal
from typing import Optional, Protocol

import requests
from requests.exceptions import RequestException, Timeout, ConnectionError

from mintprofit.config import Config
from mintprofit.errors import NetworkError, PriceLookupError

# Configure module logger
logger = logging.getLogger(__name__)

# Ledger denomination -> CoinGecko coin id
COINGECKO_COIN_IDS: dict[str, str] = {
    "uluna": "terra-luna",
}

# Margin requested on both sides of a UTC day
PRICE_WINDOW_SECONDS = 6 * 3600

MS_PER_DAY = 86_400_000


class PriceOracle(Protocol):
    """Returns the price of one unit of a currency in UST at a point in time."""

    def unit_price(self, currency: str, timestamp_ms: int) -> Decimal:
        ...


class FixedPriceOracle:
    """
    Price oracle returning a constant price per currency.

    Useful for offline runs and tests.
    """

    def __init__(self, prices: dict[str, Decimal]):
        self.prices = dict(prices)

    def unit_price(self, currency: str, timestamp_ms: int) -> Decimal:
        try:
            return self.prices[currency]
        except KeyError:
            raise PriceLookupError(f"No fixed price configured for {currency}") from None


class CoinGeckoPriceOracle:
    """
    Price oracle backed by the CoinGecko historical market chart API.

    The price series of a whole UTC day is fetched once per currency and kept;
    every lookup picks the point of that series closest to its own timestamp,
    so a run issues at most one request per day on which sales happened.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
        vs_currency: str = "usd"
    ):
        """
        Initialize the oracle.

        Args:
            base_url: CoinGecko API base URL. If None, uses Config.COINGECKO_API_URL
            session: requests session to use. A new one is created if None
            timeout: Request timeout in seconds. If None, uses Config.API_TIMEOUT
            vs_currency: Quote currency; USD stands in for UST
        """
        self.base_url = (base_url or Config.COINGECKO_API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or Config.API_TIMEOUT
        self.vs_currency = vs_currency
        self._series: dict[tuple[str, int], list[list[float]]] = {}

    def unit_price(self, currency: str, timestamp_ms: int) -> Decimal:
        """
        Look up the historical price of a currency.

        Args:
            currency: Ledger denomination, e.g. "uluna"
            timestamp_ms: Time of the sale in epoch milliseconds

        Returns:
            Price of one whole unit in UST

        Raises:
            PriceLookupError: If the currency is unknown or no price is available
            NetworkError: If the API request fails
        """
        coin_id = COINGECKO_COIN_IDS.get(currency)
        if coin_id is None:
            raise PriceLookupError(f"No price source for currency {currency}")

        day = timestamp_ms // MS_PER_DAY
        points = self._series.get((currency, day))
        if points is None:
            points = self._fetch_day(coin_id, day)
            self._series[(currency, day)] = points

        # Each point is [timestamp_ms, price]; take the one closest to the sale
        closest = min(points, key=lambda point: abs(point[0] - timestamp_ms))
        price = Decimal(str(closest[1]))
        logger.debug(f"Historical {coin_id} price at {timestamp_ms // 1000}: {price}")
        return price

    def _fetch_day(self, coin_id: str, day: int) -> list[list[float]]:
        day_start_s = day * MS_PER_DAY // 1000
        url = f"{self.base_url}/coins/{coin_id}/market_chart/range"
        params = {
            "vs_currency": self.vs_currency,
            "from": day_start_s - PRICE_WINDOW_SECONDS,
            "to": day_start_s + MS_PER_DAY // 1000 + PRICE_WINDOW_SECONDS,
        }

        logger.info(f"Requesting {coin_id} price series for day starting {day_start_s} from {url}")

        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.timeout,
                headers={"Accept": "application/json"}
            )
            response.raise_for_status()
            data = response.json()

        except Timeout as e:
            raise NetworkError(f"CoinGecko request timed out after {self.timeout}s") from e

        except ConnectionError as e:
            raise NetworkError(f"Connection error while fetching {coin_id} price: {e}") from e

        except RequestException as e:
            raise NetworkError(f"CoinGecko request failed: {e}") from e

        except ValueError as e:
            raise NetworkError(f"Failed to parse CoinGecko response: {e}") from e

        points = data.get("prices") if isinstance(data, dict) else None
        if not points:
            raise PriceLookupError(f"No {coin_id} price available for day starting {day_start_s}")

        return points


def create_price_oracle(kind: Optional[str] = None) -> PriceOracle:
    """
    Build the price oracle selected by configuration.

    Args:
        kind: "coingecko" or "fixed". If None, uses Config.PRICE_ORACLE

    Returns:
        PriceOracle instance
    """
    kind = kind or Config.PRICE_ORACLE

    if kind == "fixed":
        prices = Config.fixed_prices()
        logger.info(f"Using fixed price oracle: {prices}")
        return FixedPriceOracle(prices)

    if kind == "coingecko":
        return CoinGeckoPriceOracle()

    raise ValueError(f"Unknown price oracle: {kind}")
