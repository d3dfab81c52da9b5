import pytest
import os
import sys

# Add project root to sys.path to allow importing dales_bins modules
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, project_root)

from dales_bins.data_fetchers.fetcher_factory import create_fetcher
from dales_bins.data_fetchers.derbyshire_dales_bin_data import DerbyshireDalesBinData
from dales_bins.data_fetchers.base_fetcher import BinDataFetcher
from dales_bins.data_fetchers.ttl_cache import TTLCache


def test_create_derbyshire_dales_fetcher():
    fetcher = create_fetcher(source="derbyshire_dales")
    assert isinstance(fetcher, DerbyshireDalesBinData)
    assert isinstance(fetcher, BinDataFetcher)

def test_create_fetcher_case_insensitive():
    assert isinstance(create_fetcher(source="Derbyshire_Dales"), DerbyshireDalesBinData)
    assert isinstance(create_fetcher(source="DERBYSHIRE-DALES"), DerbyshireDalesBinData)

def test_create_fetcher_shares_given_cache():
    cache = TTLCache()
    fetcher = create_fetcher(source="derbyshire_dales", cache=cache)
    assert fetcher._address_resolver._cache is cache
    assert fetcher._collection_fetcher._cache is cache

def test_create_unknown_source_raises_error():
    unknown_source = "some_other_council"
    with pytest.raises(ValueError) as excinfo:
        create_fetcher(source=unknown_source)
    assert unknown_source in str(excinfo.value)
