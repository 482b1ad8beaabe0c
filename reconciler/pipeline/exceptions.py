"""Custom exceptions for pipeline input handling."""

from reconciler.exceptions import ReconcilerError


class InputDataError(ReconcilerError):
    """Raised when an input file cannot be read or does not hold a record list."""
