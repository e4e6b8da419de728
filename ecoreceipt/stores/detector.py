import re
import unicodedata
from typing import ClassVar

from ecoreceipt.logging.logger import Log


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class StoreDetector:
    """Resolves the supermarket (and its product collection) from OCR text.

    Patterns tolerate the usual OCR confusions (``0`` for ``o``, ``1`` for
    ``i``) and stray characters between letters.
    """

    STORE_PATTERNS: ClassVar[dict[str, tuple[re.Pattern[str], ...]]] = {
        "wong": (
            re.compile(r"\bwong\b"),
            re.compile(r"\bw0ng\b"),
            re.compile(r"\bw.?o.?n.?g\b"),
        ),
        "vivanda": (
            re.compile(r"\bvivanda\b"),
            re.compile(r"\bv1vanda\b"),
            re.compile(r"\bv.?i.?v.?a.?n.?d.?a\b"),
        ),
        "tottus": (
            re.compile(r"\btottus\b"),
            re.compile(r"\bt0ttus\b"),
            re.compile(r"\bt.?o.?t.?t.?u.?s\b"),
        ),
        "plazavea": (
            re.compile(r"\bplaza\s*vea\b"),
            re.compile(r"\bp\.?\s*vea\b"),
            re.compile(r"\bp.?l.?a.?z.?a.?.?v.?e.?a\b"),
        ),
        "metro": (
            re.compile(r"\bmetro\b"),
            re.compile(r"\bmetr0\b"),
            re.compile(r"\bm.?e.?t.?r.?o\b"),
        ),
        "flora_y_fauna": (
            re.compile(r"\bflora\s*y\s*fauna\b"),
            re.compile(r"\bflora\s*&\s*fauna\b"),
            re.compile(r"\bflora.?fauna\b"),
        ),
    }

    STORE_TO_COLLECTION: ClassVar[dict[str, str]] = {
        "wong": "wong",
        "vivanda": "vivanda",
        "tottus": "tottus",
        "plazavea": "plazavea",
        "plaza vea": "plazavea",
        "metro": "metro",
        "flora_y_fauna": "flora_y_fauna",
        "flora y fauna": "flora_y_fauna",
    }

    def __init__(self, default_collection: str = "tottus") -> None:
        self._default_collection = default_collection

    @property
    def default_collection(self) -> str:
        return self._default_collection

    def detect(self, text: str) -> str:
        """Return the collection name of the first store whose pattern matches."""
        normalized = strip_accents(text.lower())
        for store, patterns in self.STORE_PATTERNS.items():
            for pattern in patterns:
                if pattern.search(normalized):
                    collection = self.STORE_TO_COLLECTION[store]
                    Log.info(
                        "Store detected",
                        store=store,
                        collection=collection,
                        pattern=pattern.pattern,
                    )
                    return collection

        Log.warning(
            f"No store detected, using default collection '{self._default_collection}'"
        )
        return self._default_collection

    def normalize(self, name: str) -> str:
        """Map a free-form store name to its collection, or the default."""
        key = strip_accents(name.lower().strip())
        return self.STORE_TO_COLLECTION.get(key, self._default_collection)
