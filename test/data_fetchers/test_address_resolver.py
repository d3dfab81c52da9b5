import pytest
import requests
import os
import sys

# Update sys.path to include the project root
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, project_root)
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dales_bins.data_fetchers.address_resolver import AddressResolver, ADDRESS_LOOKUP_URL, ADDRESS_LOOKUP_TIMEOUT, address_cache_key
from dales_bins.data_fetchers.ttl_cache import TTLCache
from dales_bins.data_models import Address, FailureKind, FetchFailure
from mock_responses import create_mock_response, ADDRESS_LOOKUP_JSON


@pytest.fixture
def mock_post(mocker):
    return mocker.patch('dales_bins.data_fetchers.address_resolver.requests.post')


def test_resolve_addresses_success(mock_post, mocker):
    mock_post.return_value = create_mock_response(json_data=ADDRESS_LOOKUP_JSON)
    cache = TTLCache()
    addresses = AddressResolver(cache).resolve_addresses("DE4 3NN")

    assert addresses == [
        Address(uprn="10010001", uprn_with_prefix="U10010001", address_text="1 Bank Road, Matlock, DE4 3NN"),
        Address(uprn="10010002", uprn_with_prefix="U10010002", address_text="2 Bank Road, Matlock, DE4 3NN"),
    ]
    mock_post.assert_called_once_with(ADDRESS_LOOKUP_URL, headers=mocker.ANY, data=mocker.ANY, timeout=ADDRESS_LOOKUP_TIMEOUT)
    form_data = mock_post.call_args.kwargs["data"]
    assert form_data["query"] == "DE4 3NN"
    assert form_data["searchNlpg"] == "True"
    assert cache.get(address_cache_key("DE4 3NN"), 60) == addresses


def test_resolve_addresses_uses_cache(mock_post):
    mock_post.return_value = create_mock_response(json_data=ADDRESS_LOOKUP_JSON)
    resolver = AddressResolver(TTLCache())
    first = resolver.resolve_addresses("DE4 3NN")
    second = resolver.resolve_addresses("de4  3nn")
    assert first == second
    assert mock_post.call_count == 1


def test_resolve_addresses_http_error(mock_post):
    mock_post.return_value = create_mock_response("Service Unavailable", 503)
    result = AddressResolver(TTLCache()).resolve_addresses("DE4 3NN")
    assert result == FetchFailure(FailureKind.REMOTE_ERROR, status_code=503)


def test_resolve_addresses_timeout(mock_post):
    mock_post.side_effect = requests.exceptions.Timeout("timed out")
    result = AddressResolver(TTLCache()).resolve_addresses("DE4 3NN")
    assert isinstance(result, FetchFailure)
    assert result.kind == FailureKind.REMOTE_ERROR
    assert result.status_code is None


def test_resolve_addresses_invalid_json(mock_post):
    mock_post.return_value = create_mock_response("<html>oops</html>")
    result = AddressResolver(TTLCache()).resolve_addresses("DE4 3NN")
    assert isinstance(result, FetchFailure)
    assert result.kind == FailureKind.REMOTE_ERROR


def test_resolve_addresses_empty_result_not_cached(mock_post):
    mock_post.return_value = create_mock_response(json_data={})
    cache = TTLCache()
    result = AddressResolver(cache).resolve_addresses("ZZ9 9ZZ")
    assert result == FetchFailure(FailureKind.NO_ADDRESSES_FOUND)
    assert len(cache) == 0


def test_resolve_addresses_keeps_unprefixed_uprn(mock_post):
    mock_post.return_value = create_mock_response(json_data={"10010003": "3 Bank Road, Matlock, DE4 3NN"})
    addresses = AddressResolver(TTLCache()).resolve_addresses("DE4 3NN")
    assert addresses[0].uprn == "10010003"
    assert addresses[0].uprn_with_prefix == "10010003"
