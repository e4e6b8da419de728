from abc import ABC, abstractmethod

from ecoreceipt.matching.models import ProductMatch


class BaseProductMatcher(ABC):
    """Contract for product catalogue matchers."""

    @abstractmethod
    def find_similar(
        self,
        product_name: str,
        collection: str,
        validate_co2: bool = True,
    ) -> ProductMatch | None:
        """Find the catalogue product most similar to ``product_name``.

        Args:
            product_name: Cleaned name from the parser.
            collection: Store collection to search.
            validate_co2: Skip candidates without a usable CO2 estimate.

        Returns:
            The best match, or None when nothing is similar enough.

        Raises:
            MatcherUnavailableError: if the backing service is unreachable.
        """
