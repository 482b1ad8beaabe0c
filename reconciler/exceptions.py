"""Base exception for errors reported to the user of the reconciler."""

from typing import List, Optional


class ReconcilerError(Exception):
    """A user-facing error with details and remedies.

    Rendered as the primary message, then a numbered list of specific
    errors under ``errors_heading``, then a bulleted list of suggestions.
    """

    errors_heading = "Errors"

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Args:
            message: Primary error message
            errors: Specific problems found
            suggestions: Hints for fixing them
        """
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [self.message]
        if self.errors:
            lines.append(f"\n{self.errors_heading}:")
            lines.extend(f"  {i}. {error}" for i, error in enumerate(self.errors, 1))
        if self.suggestions:
            lines.append("\nSuggestions:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)
