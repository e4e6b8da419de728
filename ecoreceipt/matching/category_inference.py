"""Language-model category guess used to narrow the vector search."""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from string import Template
from typing import Any

from ecoreceipt.correction.client_base import BaseCorrectionClient
from ecoreceipt.correction.exceptions import CorrectionError
from ecoreceipt.logging.logger import Log
from ecoreceipt.matching.exceptions import MatcherError
from ecoreceipt.matching.models import CategoryInference

UNKNOWN_CATEGORY = "Sin categoría"

_DEFAULT_PROMPT_PATH = Path(__file__).parent / "prompts" / "category_prompt.txt"

SYSTEM_PROMPT = "Clasificas productos de supermercado. Responde solo con JSON válido."


def load_category_prompt(path: Path | None = None) -> Template:
    """Load the category prompt; placeholders are ``$product_name``,
    ``$store`` and ``$categories``.

    Raises:
        MatcherError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_PATH
    try:
        return Template(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise MatcherError(f"Failed to load category prompt: {exc}") from exc


class LlmCategoryInferrer:
    """Asks a completion client which of the store's categories a product is in.

    Never raises on a bad answer: failures come back as ``Sin categoría``
    with zero confidence, which disables the search filter.
    """

    def __init__(
        self,
        *,
        client: BaseCorrectionClient,
        model: str,
        categories: Mapping[str, Sequence[str]],
        temperature: float = 0.2,
        prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._categories = categories
        self._temperature = temperature
        self._prompt = load_category_prompt(prompt_path)

    def infer(self, product_name: str, store: str) -> CategoryInference:
        available = list(self._categories.get(store, ()))
        if not available:
            Log.warning("No categories configured for store", store=store)
            return CategoryInference(UNKNOWN_CATEGORY, 0.0, "store has no categories")

        prompt = self._prompt.substitute(
            product_name=product_name,
            store=store,
            categories="\n".join(f"{i}. {name}" for i, name in enumerate(available, start=1)),
        )
        try:
            raw = self._client.complete(
                model=self._model,
                temperature=self._temperature,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=prompt,
            )
            data = _parse_json_object(raw)
        except (CorrectionError, ValueError) as exc:
            Log.warning(f"Category inference failed for '{product_name}': {exc}")
            return CategoryInference(UNKNOWN_CATEGORY, 0.0, "inference failed")

        category = data.get("categoria")
        if category not in available:
            Log.warning(
                "Inferred category is not configured for store",
                product=product_name,
                category=category,
                store=store,
            )
            return CategoryInference(UNKNOWN_CATEGORY, 0.3, "category not in list")

        confidence = _confidence(data.get("confianza"))
        Log.info(
            "Category inferred",
            product=product_name,
            category=category,
            confidence=confidence,
        )
        return CategoryInference(category, confidence, str(data.get("razonamiento") or ""))


def _parse_json_object(raw: str) -> dict[str, Any]:
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("response has no JSON object")
    data = json.loads(raw[start:end + 1])
    if not isinstance(data, dict):
        raise ValueError("response JSON is not an object")
    return data


def _confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return max(0.0, min(1.0, float(value)))
