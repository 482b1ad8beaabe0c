"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

from .models import MatchingConfig

# Tolerances above default * factor are reported.
_LOOSE_TOLERANCE_FACTOR = 3


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []
    defaults = MatchingConfig()

    matching = config_dict.get("matching", {})
    if isinstance(matching, dict):
        for key in ("max_date_diff_days", "max_final_price_diff_pct", "max_score"):
            value = matching.get(key)
            default = getattr(defaults, key)
            if isinstance(value, (int, float)) and value > default * _LOOSE_TOLERANCE_FACTOR:
                warning_messages.append(
                    f"matching.{key} ({value}) is far above the default ({default}) "
                    "and may merge unrelated sales"
                )

        for key in ("missing_asking_price_penalty", "missing_percent_change_penalty"):
            value = matching.get(key)
            if isinstance(value, (int, float)) and value == 0:
                warning_messages.append(
                    f"matching.{key} is 0, so records missing that field score as perfect agreement"
                )

    sources = config_dict.get("sources", {})
    if isinstance(sources, dict):
        for name, settings in sources.items():
            if isinstance(settings, dict) and settings.get("clean_inputs") is False and name == "hemnet":
                warning_messages.append(
                    "Input cleaning is disabled for hemnet; empty scraped cards will be merged as-is"
                )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
