from abc import ABC, abstractmethod


class BaseCorrectionClient(ABC):
    """Contract for provider-specific text-completion clients."""

    @abstractmethod
    def complete(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Return provider response as plain text.

        Raises:
            CorrectionError: if the provider answered without content.
            CorrectionNetworkError: if the provider could not be reached.
        """
