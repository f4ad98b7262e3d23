"""
Error types raised by the calculation engines.
"""

from decimal import Decimal


class CalculationError(ValueError):
    """Base error for inputs an engine cannot turn into a result."""


class InsufficientHistoryError(CalculationError):
    """
    Raised when a sale cannot be matched against enough purchase lots.

    Attributes:
        requested: Quantity the caller asked to sell
        matched: Quantity covered by the available lots
        remainder: Quantity left unmatched (requested - matched)
    """

    def __init__(self, requested: Decimal, matched: Decimal):
        self.requested = requested
        self.matched = matched
        self.remainder = requested - matched
        super().__init__(
            f"Insufficient holdings. Trying to sell {requested} but only have "
            f"purchase history for {matched} (unmatched remainder {self.remainder})"
        )
