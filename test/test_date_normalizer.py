import pytest
import os
import sys

# Add project root to sys.path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from dales_bins.date_normalizer import normalize_date


@pytest.mark.parametrize("date_text, expected", [
    ("17 February, 2026", "2026-02-17"),
    ("17 February 2026", "2026-02-17"),
    ("3 mar 2026", "2026-03-03"),
    ("1   SEPT,   2026", "2026-09-01"),
    ("17/02/2026", "2026-02-17"),
    ("17/02/26", "2026-02-17"),
    ("5-6-2026", "2026-06-05"),
])
def test_normalize_date_known_formats(date_text, expected):
    assert normalize_date(date_text) == expected


@pytest.mark.parametrize("date_text", [
    "not a date",
    "",
    None,
    "17 Smarch 2026",
    "2026",
])
def test_normalize_date_unparseable_returns_none(date_text):
    assert normalize_date(date_text) is None


def test_normalize_date_finds_date_inside_label_text():
    assert normalize_date("Tuesday 17 February, 2026") == "2026-02-17"
