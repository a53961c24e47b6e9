"""
History loader for tracked addresses.

This module retrieves the complete transaction history of an address from the
Terra FCD endpoint by paging backwards from the most recent transaction, and
loads the histories of the whole registry through the durable cache.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException, Timeout, ConnectionError

from mintprofit.config import Config
from mintprofit.errors import NetworkError, SchemaError
from mintprofit.registry import Registry
from mintprofit.storage import TransactionCache

# Configure module logger
logger = logging.getLogger(__name__)

PageFetcher = Callable[[str, Optional[int], int], dict]


class FixedDelay:
    """
    Rate limiter that keeps consecutive requests at least a fixed time apart.

    One instance may be shared by several threads; callers are serialized, so
    requests issued through the same limiter never come closer together than
    `seconds`, whichever address they belong to.

    Args:
        seconds: Minimum spacing between requests
        sleep: Sleep function, injectable for tests
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        seconds: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.seconds = seconds
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._last_request: Optional[float] = None

    def wait(self) -> None:
        """Block until the next request may be sent, then claim its slot."""
        with self._lock:
            if self._last_request is not None and self.seconds > 0:
                remaining = self.seconds - (self._clock() - self._last_request)
                if remaining > 0:
                    self._sleep(remaining)
            self._last_request = self._clock()


class HistoryClient:
    """HTTP client for the FCD paginated transaction history endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: FCD base URL. If None, uses Config.FCD_URL
            session: requests session to use. A new one is created if None
            timeout: Request timeout in seconds. If None, uses Config.API_TIMEOUT
        """
        self.base_url = (base_url or Config.FCD_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or Config.API_TIMEOUT

    def fetch_page(self, address: str, offset: Optional[int], limit: int) -> dict:
        """
        Fetch one page of transactions for an address.

        Args:
            address: Account address
            offset: Continuation cursor from the previous page, None for the first page
            limit: Page size

        Returns:
            Response payload with "txs" and an optional "next" cursor

        Raises:
            NetworkError: On timeout, connection failure, HTTP error, or invalid JSON
        """
        url = f"{self.base_url}/v1/txs"
        params = {"account": address, "limit": limit}
        if offset is not None:
            params["offset"] = offset

        logger.debug(f"Requesting {url} with params: {params}")

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
            raise NetworkError(f"Request to FCD timed out after {self.timeout}s") from e

        except ConnectionError as e:
            raise NetworkError(f"Connection error while fetching txs for {address}: {e}") from e

        except RequestException as e:
            status = e.response.status_code if e.response is not None else "n/a"
            raise NetworkError(f"FCD request failed for {address} (status {status}): {e}") from e

        except ValueError as e:
            raise NetworkError(f"Failed to parse FCD response for {address}: {e}") from e

        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected FCD response type for {address}: {type(data).__name__}")

        return data


def paginate(
    fetch_page: PageFetcher,
    address: str,
    page_size: int,
    limiter: FixedDelay
) -> list[dict]:
    """
    Load every transaction of an address, newest first.

    Pages are requested until one comes back shorter than `page_size`. The
    limiter is waited on before every request, so a limiter shared with other
    paginations also spaces requests across addresses.

    Args:
        fetch_page: Callable (address, offset, limit) -> page payload
        address: Account address
        page_size: Number of transactions per page
        limiter: Rate limiter applied before each page request

    Returns:
        All transactions in pagination order

    Raises:
        NetworkError: If a page request fails
        SchemaError: If a page has no "txs" list, or a full page has no cursor
    """
    transactions: list[dict] = []
    offset: Optional[int] = None
    page_nr = 1

    while True:
        limiter.wait()
        logger.info(f"Loading txs for address: {address} on page: {page_nr}")
        page = fetch_page(address, offset, page_size)

        txs = page.get("txs")
        if not isinstance(txs, list):
            raise SchemaError(f"Page {page_nr} for {address} has no transaction list", path="txs")
        transactions.extend(txs)

        if len(txs) < page_size:
            break

        offset = page.get("next")
        if offset is None:
            raise SchemaError(
                f"Full page {page_nr} for {address} without continuation cursor", path="next"
            )

        page_nr += 1

    logger.info(f"Loaded {len(transactions)} txs for address: {address}")
    return transactions


class HistoryLoader:
    """
    Loads full transaction histories.

    All loads issued through one loader share a single rate limiter, so page
    requests stay `page_delay` apart even when addresses load concurrently.
    """

    def __init__(
        self,
        client: Optional[HistoryClient] = None,
        page_size: Optional[int] = None,
        page_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.client = client or HistoryClient()
        self.page_size = page_size or Config.PAGE_SIZE
        self.page_delay = Config.PAGE_DELAY_SECONDS if page_delay is None else page_delay
        self.limiter = FixedDelay(self.page_delay, sleep, clock)

    def load(self, address: str) -> list[dict]:
        """Load the complete history of one address."""
        logger.info(f"== Loading all txs for address: {address} ==")
        return paginate(self.client.fetch_page, address, self.page_size, self.limiter)


def fetch_histories(
    addresses: tuple[str, ...],
    loader: HistoryLoader,
    max_workers: int
) -> dict[str, list[dict]]:
    """
    Load histories of several addresses with bounded concurrency.

    The first failure cancels loads that have not started and is re-raised.

    Returns:
        Dictionary mapping address to its history, in the order of `addresses`
    """
    results: dict[str, list[dict]] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(loader.load, address): address for address in addresses}
        try:
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    return {address: results[address] for address in addresses}


def load_all_histories(
    registry: Registry,
    cache: TransactionCache,
    loader: Optional[HistoryLoader] = None,
    max_workers: Optional[int] = None,
    refresh: bool = False
) -> dict[str, list[dict]]:
    """
    Return the histories of every tracked address, using the cache when possible.

    If the cache holds every tracked address it is returned without any
    network access. Otherwise every address is fetched and the complete
    result is written to the cache before returning; nothing is written if
    any fetch fails.

    Args:
        registry: Registry of tracked addresses
        cache: Durable transaction cache
        loader: History loader used on a cache miss
        max_workers: Concurrent address loads. If None, uses Config.MAX_CONCURRENT_LOADS
        refresh: Ignore any existing cache and reload everything

    Returns:
        Dictionary mapping address to its ordered list of raw transactions
    """
    addresses = registry.all_addresses

    if not refresh and cache.exists():
        cached = cache.load()
        missing = [address for address in addresses if address not in cached]
        if not missing:
            logger.info(f"Txs cache file located. Loading txs from {cache.path}...")
            return {address: cached[address] for address in addresses}
        logger.warning(f"Txs cache {cache.path} is missing {len(missing)} addresses, reloading all")

    loader = loader or HistoryLoader()
    max_workers = max_workers or Config.MAX_CONCURRENT_LOADS

    logger.info(f"Loading txs for {len(addresses)} addresses with {max_workers} workers")
    histories = fetch_histories(addresses, loader, max_workers)
    cache.save(histories)
    return histories
