from ecoreceipt.classification.categories import CategoryNormalizer
from ecoreceipt.classification.models import ClassifiedProduct
from ecoreceipt.logging.logger import Log
from ecoreceipt.matching.base import BaseProductMatcher
from ecoreceipt.parsing.models import ParsedProduct

FALLBACK_CATEGORY = "Sin categoría"
FALLBACK_CO2_FACTOR = 5.0


class ProductClassifier:
    """Resolves parsed products to a category and CO2 factor.

    A product the catalogue does not know gets a conservative fallback
    (``Sin categoría``, 5.0 kg CO2e) and the miss is logged. Only matcher
    outages propagate.

    With a ``category_normalizer`` the catalogue category is mapped onto the
    store's threshold-table key; without one it is kept as returned.
    """

    def __init__(
        self,
        matcher: BaseProductMatcher,
        validate_co2: bool = True,
        category_normalizer: CategoryNormalizer | None = None,
    ) -> None:
        self._matcher = matcher
        self._validate_co2 = validate_co2
        self._category_normalizer = category_normalizer

    def classify(self, product: ParsedProduct, collection: str) -> ClassifiedProduct:
        match = self._matcher.find_similar(product.name, collection, self._validate_co2)

        if match is None:
            Log.warning(
                "Product not found in catalogue, using fallback impact values",
                product=product.name,
                collection=collection,
            )
            return ClassifiedProduct(
                name=product.name,
                price=product.price,
                quantity=product.quantity,
                parse_confidence=product.parse_confidence,
                category=FALLBACK_CATEGORY,
                co2_factor=FALLBACK_CO2_FACTOR,
                is_local=False,
                has_eco_packaging=False,
                barcode=product.barcode,
                unit=product.unit,
            )

        category = match.category
        if self._category_normalizer is not None:
            category = self._category_normalizer.normalize(category, collection)

        return ClassifiedProduct(
            name=product.name,
            price=product.price,
            quantity=product.quantity,
            parse_confidence=product.parse_confidence,
            category=category,
            co2_factor=match.co2_factor,
            is_local=match.is_local,
            has_eco_packaging=match.has_eco_packaging,
            barcode=product.barcode,
            unit=product.unit,
            subcategory=match.subcategory,
            matched_name=match.name,
            match_score=match.score,
        )

    def classify_all(
        self,
        products: list[ParsedProduct],
        collection: str,
    ) -> list[ClassifiedProduct]:
        classified = [self.classify(product, collection) for product in products]
        misses = sum(1 for item in classified if item.matched_name is None)
        Log.info(
            f"Classified {len(classified)} products in '{collection}' ({misses} fallbacks)"
        )
        return classified
