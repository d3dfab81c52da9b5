import logging
from typing import Optional, List, Union
from .base_fetcher import BinDataFetcher
from .address_resolver import AddressResolver
from .collection_fetcher import CollectionFetcher
from .ttl_cache import TTLCache
from ..data_models import (
    Address, BinCategory, CollectionEntry, CollectionsResult, FetchFailure, normalize_postcode,
)

logger = logging.getLogger(__name__)

ADDRESS_LOOKUP_FAILED = "Address lookup failed"
LIVE_NOTE = "Live data from Derbyshire Dales District Council."
ADDRESS_ONLY_NOTE = "Address verified via council API. Collection dates temporarily unavailable - showing mock data."
LOOKUP_FAILED_NOTE = "Unable to fetch data from council API. Error: {reason}. Please check the postcode and try again."

# Placeholder schedule shown whenever live dates are unavailable
MOCK_COLLECTIONS = (
    CollectionEntry(bin_type=BinCategory.REFUSE, date="2026-02-20"),
    CollectionEntry(bin_type=BinCategory.RECYCLING, date="2026-02-27"),
)


def postcode_hint_from_address(address: Address) -> str:
    """The council puts the postcode last in the address text, e.g. '1 Bank Road, Matlock, DE4 3NN'."""
    return address.address_text.rsplit(',', 1)[-1].strip()


class DerbyshireDalesBinData(BinDataFetcher):
    """Fetches bin collection data from the Derbyshire Dales District Council website."""

    def __init__(self, cache: Optional[TTLCache] = None,
                 address_resolver: Optional[AddressResolver] = None,
                 collection_fetcher: Optional[CollectionFetcher] = None):
        cache = cache if cache is not None else TTLCache()
        self._address_resolver = address_resolver or AddressResolver(cache)
        self._collection_fetcher = collection_fetcher or CollectionFetcher(cache)

    def _lookup_failed(self, postcode: str, reason: str) -> CollectionsResult:
        return CollectionsResult(
            postcode=postcode,
            address=ADDRESS_LOOKUP_FAILED,
            collections=list(MOCK_COLLECTIONS),
            note=LOOKUP_FAILED_NOTE.format(reason=reason),
        )

    def _fetch(self, postcode: str) -> CollectionsResult:
        logger.info(f"Looking up addresses for {postcode}...")
        addresses: Union[List[Address], FetchFailure] = self._address_resolver.resolve_addresses(postcode)
        if isinstance(addresses, FetchFailure):
            logger.warning(f"Address lookup failed for {postcode}: {addresses}")
            return self._lookup_failed(postcode, str(addresses))
        if not addresses:
            return self._lookup_failed(postcode, "No addresses found for this postcode")

        # Only the first address is used; choosing between several is not supported
        address = addresses[0]
        logger.info(f"Found {len(addresses)} addresses, using: {address.address_text}")
        postcode_hint = postcode_hint_from_address(address)

        collections = self._collection_fetcher.fetch_collections(address.uprn, address.uprn_with_prefix, postcode_hint)
        if isinstance(collections, FetchFailure) or not collections:
            logger.warning(f"Collections unavailable for UPRN {address.uprn}: {collections}. Returning address only.")
            return CollectionsResult(
                postcode=postcode,
                address=address.address_text,
                uprn=address.uprn,
                collections=list(MOCK_COLLECTIONS),
                address_count=len(addresses),
                note=ADDRESS_ONLY_NOTE,
            )

        note = LIVE_NOTE
        if len(addresses) > 1:
            note += f" ({len(addresses)} addresses found - showing first)"
        return CollectionsResult(
            postcode=postcode,
            address=address.address_text,
            uprn=address.uprn,
            collections=list(collections),
            address_count=len(addresses),
            note=note,
        )

    def get_collections(self, postcode: str) -> CollectionsResult:
        normalized_postcode = normalize_postcode(postcode)
        try:
            return self._fetch(normalized_postcode)
        except Exception as e:
            logger.error(f"Unexpected error fetching collections for {normalized_postcode}: {e}", exc_info=True)
            return self._lookup_failed(normalized_postcode, str(e))
