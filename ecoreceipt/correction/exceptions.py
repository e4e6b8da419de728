class CorrectionError(Exception):
    """Raised when the correction service returns an unusable answer."""


class CorrectionNetworkError(CorrectionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
