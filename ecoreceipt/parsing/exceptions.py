class ParsingError(Exception):
    """Base exception for receipt text parsing."""


class EmptyReceiptError(ParsingError):
    """Raised when no valid product could be recovered from a receipt."""
