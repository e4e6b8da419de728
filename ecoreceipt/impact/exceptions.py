class ImpactError(Exception):
    """Base exception for environmental impact analysis."""


class ThresholdTableError(ImpactError):
    """Raised when the category threshold table cannot be loaded or is malformed."""
