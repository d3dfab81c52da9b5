import re
import logging
from typing import Optional

logger = logging.getLogger(__name__)

MONTH_NUMBERS = {
    'january': '01', 'february': '02', 'march': '03', 'april': '04',
    'may': '05', 'june': '06', 'july': '07', 'august': '08',
    'september': '09', 'october': '10', 'november': '11', 'december': '12',
    'jan': '01', 'feb': '02', 'mar': '03', 'apr': '04',
    'jun': '06', 'jul': '07', 'aug': '08', 'sep': '09', 'sept': '09',
    'oct': '10', 'nov': '11', 'dec': '12',
}

# "17 February 2026" or "17 February, 2026"
MONTH_NAME_PATTERN = re.compile(r'(\d{1,2})\s+([A-Za-z]+),?\s+(\d{4})')
# "17/02/2026", "17-02-26"
NUMERIC_PATTERN = re.compile(r'(\d{1,2})[/\-](\d{1,2})[/\-](\d{4}|\d{2})(?!\d)')


def normalize_date(date_text: Optional[str]) -> Optional[str]:
    """
    Normalizes the date formats used on the council site to YYYY-MM-DD.

    Args:
        date_text: Text such as "17 February, 2026" or "17/02/26".

    Returns:
        The canonical date string, or None if the text is not a recognised date.
    """
    if not date_text:
        return None
    cleaned = re.sub(r'\s+', ' ', date_text).strip()

    month_match = MONTH_NAME_PATTERN.search(cleaned)
    if month_match:
        day, month_name, year = month_match.groups()
        month = MONTH_NUMBERS.get(month_name.lower())
        if month:
            return f"{year}-{month}-{day.zfill(2)}"

    numeric_match = NUMERIC_PATTERN.search(cleaned)
    if numeric_match:
        day, month, year = numeric_match.groups()
        if len(year) == 2:
            year = '20' + year
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    logger.debug(f"Unrecognised date text: '{cleaned}'")
    return None
