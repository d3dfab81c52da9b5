import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List, Dict, Any


def normalize_postcode(postcode: Optional[str]) -> str:
    """Trim, collapse internal whitespace and uppercase a postcode."""
    return re.sub(r'\s+', ' ', (postcode or '').strip()).upper()


class BinCategory(str, Enum):
    REFUSE = "Refuse"
    RECYCLING = "Recycling"
    GARDEN = "Garden"
    FOOD = "Food"
    OTHER = "Other"


@dataclass(frozen=True)
class Address:
    """A property returned by the council address lookup."""
    uprn: str
    uprn_with_prefix: str # Form the council form expects, e.g. "U10001234"
    address_text: str


@dataclass(frozen=True)
class CollectionEntry:
    """Represents a single upcoming bin collection."""
    bin_type: BinCategory
    date: str # YYYY-MM-DD

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.bin_type.value, "date": self.date}


class FailureKind:
    REMOTE_ERROR = "remote_error"
    NO_ADDRESSES_FOUND = "no_addresses_found"
    FORM_UNAVAILABLE = "form_unavailable"
    SUBMIT_FAILED = "submit_failed"
    NO_COLLECTIONS_PARSED = "no_collections_parsed"


@dataclass(frozen=True)
class FetchFailure:
    """Typed failure value returned by a fetch stage instead of raising."""
    kind: str
    status_code: Optional[int] = None
    detail: Optional[str] = None

    def __str__(self) -> str:
        reason = self.kind
        if self.status_code is not None:
            reason += f" (HTTP {self.status_code})"
        if self.detail:
            reason += f": {self.detail}"
        return reason


@dataclass
class CollectionsResult:
    """The adapter's output, serialized verbatim by the HTTP boundary."""
    postcode: str
    address: str
    collections: List[CollectionEntry]
    note: str
    uprn: Optional[str] = None
    address_count: Optional[int] = None

    @property
    def is_live(self) -> bool:
        return self.note.startswith("Live data")

    # Helper method to convert to the JSON contract consumed by the front end
    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"postcode": self.postcode, "address": self.address}
        if self.uprn is not None:
            data["uprn"] = self.uprn
        data["collections"] = [entry.to_dict() for entry in self.collections]
        if self.address_count is not None:
            data["addressCount"] = self.address_count
        data["note"] = self.note
        return data
