import abc
from ..data_models import CollectionsResult

class BinDataFetcher(abc.ABC):
    """Abstract base class for fetching bin collection data."""

    @abc.abstractmethod
    def get_collections(self, postcode: str) -> CollectionsResult:
        """
        Fetches bin collection dates for a postcode.

        Args:
            postcode: The postcode to look up, in any spacing or case.

        Returns:
            A CollectionsResult. Implementations degrade to placeholder data
            rather than raising when the upstream source fails; the result's
            note says which.
        """
        pass
