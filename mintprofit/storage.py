"""
Durable cache of raw transaction histories.

The cache is a single JSON document mapping address -> ordered list of raw
transactions. It is written once, in full, after every address has been
loaded, and read in place of network access on later runs.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from mintprofit.config import Config

# Configure module logger
logger = logging.getLogger(__name__)


class TransactionCache:
    """
    Repository for the cached transaction capture.

    Writes go to a temporary file in the same directory and are renamed into
    place, so a failed write never leaves a partial cache behind.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize the cache with a file path.

        Args:
            path: Path to the cache file. If None, uses Config.TX_CACHE_FILE
        """
        self.path = Path(path or Config.TX_CACHE_FILE)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> dict[str, list[dict]]:
        """
        Read the full capture.

        Returns:
            Dictionary mapping address to its ordered list of raw transactions

        Raises:
            ValueError: If the file is not a JSON object of lists
        """
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
            raise ValueError(f"Malformed transaction cache: {self.path}")

        return data

    def save(self, histories: dict[str, list[dict]]) -> None:
        """
        Persist the full capture atomically.

        Args:
            histories: Dictionary mapping address to its ordered list of raw transactions
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(histories, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        total = sum(len(txs) for txs in histories.values())
        logger.info(f"Saved {total} transactions for {len(histories)} addresses to {self.path}")
