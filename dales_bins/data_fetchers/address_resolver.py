import logging
import requests
from typing import Optional, List, Union
from .ttl_cache import TTLCache, ADDRESS_CACHE_TTL
from ..data_models import Address, FailureKind, FetchFailure, normalize_postcode

logger = logging.getLogger(__name__)

# --- Configuration ---
BASE_URL = "https://selfserve.derbyshiredales.gov.uk"
ADDRESS_LOOKUP_URL = f"{BASE_URL}/core/addresslookup"
ADDRESS_LOOKUP_TIMEOUT = 5 # seconds
UPRN_PREFIX = "U"
HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Referer': f"{BASE_URL}/",
}


def address_cache_key(postcode: str) -> str:
    return f"addresses_{normalize_postcode(postcode).replace(' ', '')}"


class AddressResolver:
    """Resolves a postcode to the council's list of addresses and UPRNs."""

    def __init__(self, cache: Optional[TTLCache] = None):
        self._cache = cache if cache is not None else TTLCache()

    def resolve_addresses(self, postcode: str) -> Union[List[Address], FetchFailure]:
        """
        Looks up every address the council holds for a postcode.

        Args:
            postcode: The postcode to search for.

        Returns:
            A non-empty list of Address objects in the order the council returned
            them, or a FetchFailure describing why the lookup failed.
        """
        cache_key = address_cache_key(postcode)
        cached = self._cache.get(cache_key, ADDRESS_CACHE_TTL)
        if cached is not None:
            return cached

        form_data = {
            'query': postcode,
            'searchNlpg': 'True',
            'manualaddressentry': 'False',
            'classification': '',
        }
        try:
            response = requests.post(ADDRESS_LOOKUP_URL, headers=HEADERS, data=form_data, timeout=ADDRESS_LOOKUP_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.error(f"Address lookup request failed for {postcode}: {e}")
            return FetchFailure(FailureKind.REMOTE_ERROR, detail=type(e).__name__)

        if not response.ok:
            logger.error(f"Address lookup for {postcode} returned HTTP {response.status_code}")
            return FetchFailure(FailureKind.REMOTE_ERROR, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Address lookup for {postcode} did not return JSON: {e}")
            return FetchFailure(FailureKind.REMOTE_ERROR, status_code=response.status_code, detail="invalid JSON")
        if not isinstance(data, dict):
            logger.error(f"Unexpected address lookup payload for {postcode}: {type(data).__name__}")
            return FetchFailure(FailureKind.REMOTE_ERROR, status_code=response.status_code, detail="unexpected payload")

        addresses = [
            Address(
                uprn=prefixed_uprn[len(UPRN_PREFIX):] if prefixed_uprn.startswith(UPRN_PREFIX) else prefixed_uprn,
                uprn_with_prefix=prefixed_uprn,
                address_text=str(address_text),
            )
            for prefixed_uprn, address_text in data.items()
        ]
        if not addresses:
            logger.warning(f"No addresses found for {postcode}")
            return FetchFailure(FailureKind.NO_ADDRESSES_FOUND)

        logger.info(f"Found {len(addresses)} addresses for {postcode}")
        self._cache.set(cache_key, addresses, ADDRESS_CACHE_TTL)
        return addresses
