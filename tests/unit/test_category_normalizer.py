import pytest

from ecoreceipt.classification.categories import CATEGORY_SYNONYMS, CategoryNormalizer
from ecoreceipt.impact.models import ImpactLevel
from ecoreceipt.impact.thresholds import ThresholdTable


@pytest.fixture()
def table() -> ThresholdTable:
    return ThresholdTable.from_file()


@pytest.fixture()
def normalizer(table: ThresholdTable) -> CategoryNormalizer:
    return CategoryNormalizer.from_thresholds(table)


class TestCategoryNormalizer:
    @pytest.mark.parametrize(
        ("raw", "store", "expected"),
        [
            ("lacteos", "tottus", "Lácteos y Frescos"),
            ("Lácteos", "tottus", "Lácteos y Frescos"),
            ("  LECHE y derivados ", "tottus", "Lácteos y Frescos"),
            ("Bebidas", "tottus", "Aguas y Jugos"),
            ("frozen", "plazavea", "Congelados"),
            ("lacteos", "metro", "Lácteos"),
            ("lacteos", "wong", "Lácteos y Huevos"),
        ],
    )
    def test_synonym_resolves_to_table_key(
        self,
        normalizer: CategoryNormalizer,
        table: ThresholdTable,
        raw: str,
        store: str,
        expected: str,
    ) -> None:
        category = normalizer.normalize(raw, store)

        assert category == expected
        assert table.get_thresholds(store, category) is not None

    def test_exact_key_is_kept(self, normalizer: CategoryNormalizer) -> None:
        assert normalizer.normalize("Bebidas", "metro") == "Bebidas"
        assert normalizer.normalize("Higiene Personal", "tottus") == "Higiene Personal"

    def test_first_matching_category_wins(self, normalizer: CategoryNormalizer) -> None:
        assert normalizer.normalize("jamon", "tottus") == "Embutidos y Quesos"

    def test_unrecognized_category(self, normalizer: CategoryNormalizer) -> None:
        assert normalizer.normalize("Juguetes", "tottus") == "Sin categoría"

    def test_unknown_store_has_no_synonyms(self, normalizer: CategoryNormalizer) -> None:
        assert normalizer.normalize("lacteos", "makro") == "Sin categoría"

    def test_uncategorized_passes_through(self, normalizer: CategoryNormalizer) -> None:
        assert normalizer.normalize("Sin categoría", "tottus") == "Sin categoría"

    def test_normalized_category_uses_store_thresholds(
        self,
        normalizer: CategoryNormalizer,
        table: ThresholdTable,
    ) -> None:
        raw_level = table.classify("tottus", "lacteos", 1.2)
        normalized_level = table.classify("tottus", normalizer.normalize("lacteos", "tottus"), 1.2)

        assert raw_level is ImpactLevel.LOW
        assert normalized_level is ImpactLevel.MEDIUM

    def test_every_synonym_target_exists_in_bundled_table(self, table: ThresholdTable) -> None:
        for store, categories in CATEGORY_SYNONYMS.items():
            assert set(categories) <= set(table.categories(store)), store
