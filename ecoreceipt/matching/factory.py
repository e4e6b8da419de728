import httpx

from ecoreceipt.config.settings import Settings
from ecoreceipt.correction.factory import CorrectorFactory
from ecoreceipt.impact.thresholds import ThresholdTable
from ecoreceipt.matching.base import BaseProductMatcher
from ecoreceipt.matching.category_inference import LlmCategoryInferrer
from ecoreceipt.matching.embeddings import OpenAIEmbeddingsClient
from ecoreceipt.matching.null_matcher import NullProductMatcher
from ecoreceipt.matching.qdrant_matcher import QdrantProductMatcher


class MatcherFactory:
    """Creates the configured product matcher."""

    PROVIDERS: tuple[str, ...] = ("qdrant", "none")

    @classmethod
    def create(
        cls,
        settings: Settings,
        thresholds: ThresholdTable | None = None,
    ) -> BaseProductMatcher:
        """Create the matcher. ``thresholds`` supplies the category list for
        the optional category filter; it is loaded from settings when omitted.
        """
        provider = settings.matcher_provider.lower()
        if provider == "none":
            return NullProductMatcher()
        if provider != "qdrant":
            raise ValueError(
                f"Unknown matcher provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
            )

        headers = {"api-key": settings.qdrant_api_key} if settings.qdrant_api_key else {}
        http_client = httpx.Client(
            base_url=settings.qdrant_url,
            headers=headers,
            timeout=settings.qdrant_timeout_seconds,
        )
        embedder = OpenAIEmbeddingsClient(
            api_key=settings.embeddings_api_key,
            model=settings.embeddings_model_name,
            dimensions=settings.embeddings_dimensions,
            timeout_seconds=settings.embeddings_timeout_seconds,
        )
        return QdrantProductMatcher(
            embedder=embedder,
            http_client=http_client,
            similarity_threshold=settings.matcher_similarity_threshold,
            score_threshold=settings.matcher_score_threshold,
            limit=settings.matcher_search_limit,
            category_inferrer=cls._create_category_inferrer(settings, thresholds),
            category_filter_min_confidence=settings.matcher_category_filter_min_confidence,
        )

    @classmethod
    def _create_category_inferrer(
        cls,
        settings: Settings,
        thresholds: ThresholdTable | None,
    ) -> LlmCategoryInferrer | None:
        if not settings.matcher_category_filter:
            return None
        if thresholds is None:
            thresholds = ThresholdTable.from_file(settings.thresholds_path)
        return LlmCategoryInferrer(
            client=CorrectorFactory.create_client(settings),
            model=CorrectorFactory.model_name(settings),
            categories={store: thresholds.categories(store) for store in thresholds.stores},
        )
