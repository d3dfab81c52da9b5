import logging
from typing import Optional
from .base_fetcher import BinDataFetcher
from .derbyshire_dales_bin_data import DerbyshireDalesBinData
from .ttl_cache import TTLCache

logger = logging.getLogger(__name__)

def create_fetcher(source: str, cache: Optional[TTLCache] = None) -> BinDataFetcher:
    """
    Factory function to create the appropriate BinDataFetcher instance.

    Args:
        source: The identifier for the data source (e.g., "derbyshire_dales").
        cache: Cache shared by the fetcher's lookups. A fresh one is created if omitted.

    Returns:
        An instance conforming to the BinDataFetcher interface.

    Raises:
        ValueError: If the specified source is unknown.
    """
    logger.info(f"Creating fetcher for source: '{source}'")

    if source.lower() in ("derbyshire_dales", "derbyshire-dales", "derbyshiredales"):
        return DerbyshireDalesBinData(cache=cache if cache is not None else TTLCache())
    # --- Add other sources here using elif ---
    logger.error(f"Unknown data source requested: {source}")
    raise ValueError(f"Unknown data source: {source}")
