import re
import unicodedata

import httpx
import openai

from ecoreceipt.matching.exceptions import MatcherUnavailableError

_NON_WORD_RE = re.compile(r"[^\w\s]")
_SPACES_RE = re.compile(r"\s+")


def normalize_product_name(name: str) -> str:
    """Lower-case, strip accents and punctuation, collapse spaces."""
    decomposed = unicodedata.normalize("NFD", name.lower().strip())
    without_accents = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    without_punctuation = _NON_WORD_RE.sub("", without_accents)
    return _SPACES_RE.sub(" ", without_punctuation).strip()


class OpenAIEmbeddingsClient:
    """Product-name embeddings through the OpenAI embeddings API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        dimensions: int,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._model = model
        self._dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        try:
            response = self._client.embeddings.create(
                model=self._model,
                input=text,
                dimensions=self._dimensions,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise MatcherUnavailableError(f"Embeddings network error: {exc}") from exc
        except openai.APIError as exc:
            raise MatcherUnavailableError(f"Embeddings API error: {exc}") from exc

        if not response.data:
            raise MatcherUnavailableError("Embeddings API returned no vectors")
        return list(response.data[0].embedding)
