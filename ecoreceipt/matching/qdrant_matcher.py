"""Vector-similarity product matcher over Qdrant's REST API."""

from typing import Any, Protocol

import httpx

from ecoreceipt.logging.logger import Log
from ecoreceipt.matching.base import BaseProductMatcher
from ecoreceipt.matching.embeddings import normalize_product_name
from ecoreceipt.matching.exceptions import MatcherUnavailableError
from ecoreceipt.matching.models import CategoryInference, ProductMatch

UNCATEGORIZED = "Sin categoría"


class Embedder(Protocol):
    def embed(self, text: str) -> list[float]: ...


class CategoryInferrer(Protocol):
    def infer(self, product_name: str, store: str) -> CategoryInference: ...


class QdrantProductMatcher(BaseProductMatcher):
    """Embeds the product name and searches the store's Qdrant collection.

    Search results above ``score_threshold`` come back from Qdrant; only
    candidates reaching ``similarity_threshold`` are accepted as a match.

    With a ``category_inferrer`` the search is restricted to the inferred
    ``categoria_principal`` when the guess is at least
    ``category_filter_min_confidence`` confident.
    """

    def __init__(
        self,
        *,
        embedder: Embedder,
        http_client: httpx.Client,
        similarity_threshold: float = 0.6,
        score_threshold: float = 0.5,
        limit: int = 5,
        category_inferrer: CategoryInferrer | None = None,
        category_filter_min_confidence: float = 0.6,
    ) -> None:
        self._embedder = embedder
        self._http = http_client
        self._similarity_threshold = similarity_threshold
        self._score_threshold = score_threshold
        self._limit = limit
        self._category_inferrer = category_inferrer
        self._category_filter_min_confidence = category_filter_min_confidence

    def find_similar(
        self,
        product_name: str,
        collection: str,
        validate_co2: bool = True,
    ) -> ProductMatch | None:
        if not self._collection_exists(collection):
            Log.warning(f"Collection '{collection}' does not exist in Qdrant")
            return None

        normalized = normalize_product_name(product_name)
        Log.debug("Embedding product name", original=product_name, normalized=normalized)
        vector = self._embedder.embed(normalized)
        hits = self._search(collection, vector, self._category_filter(product_name, collection))

        if not hits:
            Log.warning("No candidates found", product=product_name, collection=collection)
            return None

        Log.debug(
            f"Top {len(hits)} candidates for '{product_name}'",
            candidates=[
                (hit.get("payload", {}).get("nombre"), round(float(hit.get("score", 0.0)), 2))
                for hit in hits
            ],
        )

        for hit in hits:
            score = float(hit.get("score", 0.0))
            if score < self._similarity_threshold:
                continue
            match = self._build_match(hit, product_name, score, validate_co2)
            if match is not None:
                Log.info(
                    "Product matched",
                    original=product_name,
                    matched=match.name,
                    score=round(score, 2),
                    category=match.category,
                    co2=match.co2_factor,
                )
                return match

        Log.warning(
            "Candidates found but none reached the similarity threshold",
            product=product_name,
            best_score=float(hits[0].get("score", 0.0)),
            threshold=self._similarity_threshold,
        )
        return None

    def _collection_exists(self, collection: str) -> bool:
        try:
            response = self._http.get(f"/collections/{collection}")
        except httpx.HTTPError as exc:
            raise MatcherUnavailableError(f"Qdrant unreachable: {exc}") from exc
        if response.status_code == 404:
            return False
        if response.is_error:
            raise MatcherUnavailableError(
                f"Qdrant collection lookup failed with HTTP {response.status_code}"
            )
        return True

    def _category_filter(self, product_name: str, collection: str) -> str | None:
        if self._category_inferrer is None:
            return None
        inference = self._category_inferrer.infer(product_name, collection)
        if (
            inference.category == UNCATEGORIZED
            or inference.confidence < self._category_filter_min_confidence
        ):
            Log.debug(
                "Searching without category filter",
                product=product_name,
                category=inference.category,
                confidence=inference.confidence,
            )
            return None
        return inference.category

    def _search(
        self,
        collection: str,
        vector: list[float],
        category: str | None = None,
    ) -> list[dict[str, Any]]:
        body: dict[str, Any] = {
            "vector": vector,
            "limit": self._limit,
            "with_payload": True,
            "score_threshold": self._score_threshold,
        }
        if category is not None:
            body["filter"] = {
                "must": [{"key": "categoria_principal", "match": {"value": category}}]
            }
        try:
            response = self._http.post(f"/collections/{collection}/points/search", json=body)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise MatcherUnavailableError(f"Qdrant search failed: {exc}") from exc

        result = response.json().get("result") or []
        if not isinstance(result, list):
            raise MatcherUnavailableError("Qdrant search returned an unexpected payload")
        return result

    @staticmethod
    def _build_match(
        hit: dict[str, Any],
        product_name: str,
        score: float,
        validate_co2: bool,
    ) -> ProductMatch | None:
        payload = hit.get("payload") or {}
        raw_co2 = payload.get("co2_estimado", payload.get("co2e_estimado"))
        try:
            co2 = float(raw_co2) if raw_co2 is not None else None
        except (TypeError, ValueError):
            co2 = None

        if co2 is None or co2 < 0:
            if validate_co2:
                return None
            co2 = 0.0

        return ProductMatch(
            name=payload.get("nombre") or product_name,
            category=payload.get("categoria_principal") or payload.get("categoria") or UNCATEGORIZED,
            co2_factor=co2,
            score=score,
            subcategory=payload.get("subcategoria"),
            is_local=bool(payload.get("es_local", False)),
            has_eco_packaging=bool(payload.get("empaque_ecologico", False)),
        )
