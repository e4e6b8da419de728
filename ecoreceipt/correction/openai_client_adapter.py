import httpx
import openai

from ecoreceipt.correction.client_base import BaseCorrectionClient
from ecoreceipt.correction.exceptions import CorrectionError, CorrectionNetworkError


class OpenAIClientAdapter(BaseCorrectionClient):
    """Correction client built on an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def complete(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        messages = [{"role": "user", "content": user_prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=messages,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise CorrectionNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise CorrectionNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise CorrectionError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise CorrectionError("AI returned empty response")
        return content
