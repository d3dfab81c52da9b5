import re
import logging
from typing import List, Optional
from bs4 import BeautifulSoup
from ..data_models import BinCategory, CollectionEntry
from ..date_normalizer import normalize_date

logger = logging.getLogger(__name__)

# "<strong>Tuesday</strong> 17 February, 2026"
WEEKDAY_LABEL_PATTERN = re.compile(r'^[A-Za-z]{3,9}$')
DATE_TEXT_PATTERN = re.compile(r'\d{1,2}\s+[A-Za-z]+,?\s+\d{4}')

# Checked in order, first match wins
CATEGORY_KEYWORDS = [
    (("domestic", "refuse"), BinCategory.REFUSE),
    (("recycling",), BinCategory.RECYCLING),
    (("garden",), BinCategory.GARDEN),
    (("food",), BinCategory.FOOD),
]


def classify_bin_type(bin_type_text: str) -> BinCategory:
    """Maps the council's free-text waste type onto a BinCategory."""
    lowered = (bin_type_text or '').lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return BinCategory.OTHER


def _date_text_after_label(element) -> Optional[str]:
    """Returns the date text if element is "<strong>Weekday</strong> D Month, YYYY"."""
    label = element.find('strong', recursive=False)
    if label is None or not WEEKDAY_LABEL_PATTERN.match(label.get_text(strip=True)):
        return None
    remainder = ' '.join(
        text.strip() for text in label.find_next_siblings(string=True) if text.strip()
    )
    date_match = DATE_TEXT_PATTERN.search(remainder)
    return date_match.group(0) if date_match else None


def _bin_type_text(date_element) -> Optional[str]:
    sibling = date_element.find_next_sibling(True)
    # A following date fragment means this one has no bin type of its own
    if sibling is None or _date_text_after_label(sibling):
        return None
    label = sibling.find('strong')
    if label is None:
        return None
    text = label.get_text(strip=True)
    return text or None


def parse_collection_dates(html: Optional[str]) -> List[CollectionEntry]:
    """
    Extracts collection entries from the council's collection results page.

    Each collection is rendered as a pair of sibling elements:
    <div class="col-sm-5"><strong>Tuesday</strong> 17 February, 2026</div>
    <div class="col-sm-6"><strong>Domestic Waste 140L Bin</strong></div>

    Fragments that do not fit this shape are skipped. The result is
    deduplicated on (bin type, date) and sorted by date. Never raises.
    """
    if not html:
        return []
    try:
        soup = BeautifulSoup(html, 'html.parser')
    except Exception as e:
        logger.error(f"Could not parse collections HTML: {e}", exc_info=True)
        return []

    collections: List[CollectionEntry] = []
    seen = set()
    for element in soup.find_all(True):
        try:
            date_text = _date_text_after_label(element)
            if not date_text:
                continue
            bin_type_text = _bin_type_text(element)
            if not bin_type_text:
                logger.debug(f"No bin type found next to '{date_text}', skipping")
                continue
            date = normalize_date(date_text)
            if not date:
                logger.warning(f"Skipping collection with unparseable date '{date_text}'")
                continue
            entry = CollectionEntry(bin_type=classify_bin_type(bin_type_text), date=date)
        except Exception as e:
            logger.warning(f"Skipping malformed collection fragment: {e}")
            continue
        if entry in seen:
            continue
        seen.add(entry)
        collections.append(entry)

    collections.sort(key=lambda entry: entry.date)
    logger.info(f"Parsed {len(collections)} collections from HTML")
    return collections
