"""Custom exceptions for configuration management."""

from reconciler.exceptions import ReconcilerError


class ConfigurationError(ReconcilerError):
    """Raised when the YAML file or environment variables are missing or invalid.

    ``errors`` holds one entry per failed field, for example
    ``"matching -> max_score: Input should be greater than 0"``.
    """

    errors_heading = "Validation Errors"
