from ecoreceipt.matching.base import BaseProductMatcher
from ecoreceipt.matching.models import ProductMatch


class NullProductMatcher(BaseProductMatcher):
    """Matcher that never matches. Every product gets the fallback impact values.

    No network calls; meant for offline runs of the pipeline.
    """

    def find_similar(
        self,
        product_name: str,
        collection: str,
        validate_co2: bool = True,
    ) -> ProductMatch | None:
        _ = product_name, collection, validate_co2
        return None
