class MatcherError(Exception):
    """Base exception for product matching."""


class MatcherUnavailableError(MatcherError):
    """Raised when the embeddings or vector search service cannot be reached."""
