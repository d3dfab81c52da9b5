import logging
import requests
from bs4 import BeautifulSoup
from typing import Optional, List, Dict, Union
from .address_resolver import BASE_URL, HEADERS
from .collection_parser import parse_collection_dates
from .ttl_cache import TTLCache, COLLECTION_CACHE_TTL
from ..data_models import CollectionEntry, FailureKind, FetchFailure

logger = logging.getLogger(__name__)

# --- Configuration ---
FORM_URL = f"{BASE_URL}/renderform.aspx?t=103&k=9644C066D2168A4C21BCDA351DA2642526359DFF"
SUBMIT_URL = f"{BASE_URL}/renderform/Form"
FORM_TIMEOUT = 5 # seconds
SUBMIT_TIMEOUT = 30 # the council takes up to ~30s to render results under load
FORM_TOKEN_FIELDS = ['__RequestVerificationToken', 'FormGuid', 'ObjectTemplateID', 'CurrentSectionID']
ADDRESS_FIELD = 'FF2924'


def collection_cache_key(uprn: str) -> str:
    return f"collections_{uprn}"


def extract_form_tokens(form_html: str) -> Dict[str, str]:
    """Returns the hidden token fields from the form page, '' for any that are missing."""
    soup = BeautifulSoup(form_html or '', 'html.parser')
    tokens = {}
    for field_name in FORM_TOKEN_FIELDS:
        field = soup.find('input', {'name': field_name})
        tokens[field_name] = (field.get('value') or '') if field else ''
        if not tokens[field_name]:
            logger.warning(f"Form token {field_name} missing from form page")
    return tokens


class CollectionFetcher:
    """Fetches and parses the collection schedule for a single UPRN."""

    def __init__(self, cache: Optional[TTLCache] = None):
        self._cache = cache if cache is not None else TTLCache()

    def _get_form_tokens(self, session: requests.Session) -> Union[Dict[str, str], FetchFailure]:
        try:
            response = session.get(FORM_URL, headers=HEADERS, timeout=FORM_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.error(f"Could not load collection form: {e}")
            return FetchFailure(FailureKind.FORM_UNAVAILABLE, detail=type(e).__name__)
        if not response.ok:
            logger.error(f"Collection form returned HTTP {response.status_code}")
            return FetchFailure(FailureKind.FORM_UNAVAILABLE, status_code=response.status_code)
        return extract_form_tokens(response.text)

    def _submit_form(self, session: requests.Session, tokens: Dict[str, str], uprn_with_prefix: str, postcode_hint: str) -> Union[str, FetchFailure]:
        form_data = dict(tokens)
        form_data.update({
            'Trigger': 'submit',
            'TriggerCtl': '',
            ADDRESS_FIELD: uprn_with_prefix,
            f'{ADDRESS_FIELD}lbltxt': 'Collection address',
            f'{ADDRESS_FIELD}-text': postcode_hint,
        })
        headers = dict(HEADERS, Referer=FORM_URL)
        try:
            response = session.post(SUBMIT_URL, headers=headers, data=form_data, timeout=SUBMIT_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.error(f"Collection form submission failed for {uprn_with_prefix}: {e}")
            return FetchFailure(FailureKind.SUBMIT_FAILED, detail=type(e).__name__)
        if not response.ok:
            logger.error(f"Collection form submission for {uprn_with_prefix} returned HTTP {response.status_code}")
            return FetchFailure(FailureKind.SUBMIT_FAILED, status_code=response.status_code)
        return response.text

    def fetch_collections(self, uprn: str, uprn_with_prefix: str, postcode_hint: str = '') -> Union[List[CollectionEntry], FetchFailure]:
        """
        Fetches the upcoming collections for a property.

        Args:
            uprn: The UPRN without prefix, used as the cache key.
            uprn_with_prefix: The UPRN as the council form expects it.
            postcode_hint: Postcode resubmitted alongside the UPRN; may be empty.

        Returns:
            A non-empty, date-sorted list of CollectionEntry objects, or a
            FetchFailure for the stage that failed.
        """
        cache_key = collection_cache_key(uprn)
        cached = self._cache.get(cache_key, COLLECTION_CACHE_TTL)
        if cached is not None:
            return cached

        # The form tokens are bound to the session cookies set by the GET
        with requests.Session() as session:
            tokens = self._get_form_tokens(session)
            if isinstance(tokens, FetchFailure):
                return tokens
            result_html = self._submit_form(session, tokens, uprn_with_prefix, postcode_hint)
            if isinstance(result_html, FetchFailure):
                return result_html

        collections = parse_collection_dates(result_html)
        if not collections:
            logger.warning(f"No collections parsed for UPRN {uprn}")
            return FetchFailure(FailureKind.NO_COLLECTIONS_PARSED)

        self._cache.set(cache_key, collections, COLLECTION_CACHE_TTL)
        return collections
