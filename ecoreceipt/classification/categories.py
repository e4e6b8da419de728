"""Maps free-form catalogue categories onto the threshold table's keys.

Catalogue payloads carry categories as typed by whoever loaded them
("lacteos", "Bebidas", "frozen"). Impact thresholds are keyed by each
store's canonical category names, so every matched category goes through
``CategoryNormalizer.normalize`` before it reaches the aggregator.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ecoreceipt.impact.thresholds import ThresholdTable
from ecoreceipt.logging.logger import Log
from ecoreceipt.stores.detector import strip_accents

UNKNOWN_CATEGORY = "Sin categoría"

# store -> canonical category -> lower-case unaccented variants.
# Order matters: the first category with a variant contained in the raw
# name wins.
CATEGORY_SYNONYMS: Mapping[str, Mapping[str, tuple[str, ...]]] = {
    "tottus": {
        "Congelados": ("congelados", "frozen", "helados"),
        "Desayunos y Panadería": ("desayunos", "panaderia", "breakfast", "bakery", "pan", "galletas"),
        "Despensa": ("despensa", "abarrotes", "granos", "cereales", "enlatados"),
        "Dulces y Snacks": ("dulces", "snacks", "golosinas", "candy", "chocolates", "chizitos"),
        "Embutidos y Quesos": ("embutidos", "quesos", "cheese", "salchichas", "jamon"),
        "Huevos": ("huevos", "eggs"),
        "Jamón": ("jamon", "ham"),
        "Lácteos y Frescos": ("lacteos", "frescos", "dairy", "leche", "yogurt", "mantequilla"),
        "Aguas y Jugos": ("aguas", "jugos", "water", "juice", "bebidas"),
        "Cervezas": ("cervezas", "beer", "cerveza"),
        "Licores": ("licores", "liquor", "spirits", "ron", "vodka", "whisky"),
    },
    "metro": {
        "Aves y Huevos": ("aves", "huevos", "poultry", "eggs", "pollo"),
        "Carnes": ("carnes", "meat", "beef", "res", "carne"),
        "Aves y Pescados": ("pescados", "fish", "salmon", "atun", "mariscos"),
        "Desayuno": ("desayuno", "breakfast", "cereales", "avena"),
        "Embutidos y Fiambres": ("embutidos", "fiambres", "salchichas", "mortadela"),
        "Frutas y Verduras": ("frutas", "verduras", "fruits", "vegetables", "produce", "hortalizas"),
        "Lácteos": ("lacteos", "dairy", "leche", "yogurt"),
        "Licores y Cervezas": ("licores", "cervezas", "beer", "liquor", "cerveza"),
        "Bebidas": ("bebidas", "drinks", "jugos", "gaseosas", "refrescos"),
        "Cuidado Personal": ("cuidado personal", "personal care", "higiene"),
        "Despensa": ("despensa", "abarrotes", "granos"),
        "Limpieza": ("limpieza", "cleaning", "detergente", "jabon"),
        "Panadería y Pastelería": ("panaderia", "pasteleria", "bakery", "pan", "tortas"),
    },
    "wong": {
        "Aguas y Bebidas": ("aguas", "bebidas", "drinks", "water", "jugos", "gaseosas"),
        "Comidas y Rostizados": ("comidas", "rostizados", "prepared meals", "pollo rostizado"),
        "Embutidos y Fiambres": ("embutidos", "fiambres", "salchichas", "jamon"),
        "Frutas y Verduras": ("frutas", "verduras", "fruits", "vegetables", "produce"),
        "Lácteos y Huevos": ("lacteos", "huevos", "dairy", "eggs", "leche", "yogurt"),
        "Panadería y Pastelería": ("panaderia", "pasteleria", "bakery", "pan", "tortas"),
    },
    "plazavea": {
        "Abarrotes": ("abarrotes", "comestibles", "despensa", "granos", "cereales"),
        "Bebidas": ("bebidas", "drinks", "jugos", "gaseosas", "aguas"),
        "Carnes, Aves y Pescados": ("carnes", "aves", "pescados", "meat", "fish", "pollo"),
        "Congelados": ("congelados", "frozen", "helados"),
        "Desayunos": ("desayunos", "breakfast", "cereales", "avena"),
        "Frutas y Verduras": ("frutas", "verduras", "fruits", "vegetables", "produce"),
        "Limpieza": ("limpieza", "cleaning", "detergente", "jabon"),
        "Lácteos y Huevos": ("lacteos", "huevos", "refrigerados", "dairy", "eggs"),
        "Panadería y Pastelería": ("panaderia", "pasteleria", "bakery", "pan"),
        "Pollo Rostizado y Comidas Preparadas": ("pollo rostizado", "comidas preparadas", "prepared meals"),
        "Quesos y Fiambres": ("quesos", "fiambres", "cheese", "embutidos"),
        "Vinos, Licores y Cervezas": ("vinos", "licores", "cervezas", "wine", "liquor", "beer"),
    },
    "flora_y_fauna": {
        "Abarrotes": ("abarrotes", "organicos", "despensa", "granos"),
        "Congelados": ("congelados", "frozen"),
        "Cuidado Personal": ("cuidado personal", "personal care", "higiene"),
        "Frescos": ("frescos", "fresh", "refrigerados"),
        "Hogar y Limpieza": ("hogar", "limpieza", "cleaning", "detergente"),
    },
    "vivanda": {
        "Abarrotes": ("abarrotes", "despensa", "granos"),
        "Bebidas": ("bebidas", "drinks", "jugos", "gaseosas"),
        "Carnes, Aves y Pescados": ("carnes", "aves", "pescados", "meat", "fish"),
        "Congelados": ("congelados", "frozen"),
        "Cuidado Personal y Salud": ("cuidado personal", "salud", "health", "personal care"),
        "Desayunos": ("desayunos", "breakfast", "cereales"),
        "Frutas y Verduras": ("frutas", "verduras", "fruits", "vegetables"),
        "Limpieza": ("limpieza", "cleaning", "detergente"),
        "Lácteos y Huevos": ("lacteos", "huevos", "dairy", "eggs"),
        "Vinos, Licores y Cervezas": ("vinos", "licores", "cervezas", "wine", "liquor"),
    },
}


class CategoryNormalizer:
    """Store-scoped category lookup: exact key first, then synonyms.

    A category that matches neither becomes ``Sin categoría``.
    """

    def __init__(
        self,
        known_categories: Mapping[str, Iterable[str]],
        synonyms: Mapping[str, Mapping[str, tuple[str, ...]]] = CATEGORY_SYNONYMS,
    ) -> None:
        self._known = MappingProxyType(
            {store: frozenset(categories) for store, categories in known_categories.items()}
        )
        self._synonyms = synonyms

    @classmethod
    def from_thresholds(cls, table: ThresholdTable) -> "CategoryNormalizer":
        return cls({store: table.categories(store) for store in table.stores})

    def normalize(self, raw_category: str, store: str) -> str:
        if raw_category in self._known.get(store, ()):
            return raw_category
        if raw_category == UNKNOWN_CATEGORY:
            return UNKNOWN_CATEGORY

        folded = strip_accents(raw_category.lower().strip())
        for category, variants in self._synonyms.get(store, {}).items():
            if any(variant in folded for variant in variants):
                Log.info(
                    "Category mapped by synonym",
                    original=raw_category,
                    normalized=category,
                    store=store,
                )
                return category

        Log.warning("Unrecognized category", category=raw_category, store=store)
        return UNKNOWN_CATEGORY
