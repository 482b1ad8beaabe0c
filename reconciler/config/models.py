"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator


class SourceTag(str, Enum):
    """The two listing sources the reconciler understands.

    Booli is source A (the side that walks the candidates), Hemnet is
    source B (the side that is indexed and preferred as primary).
    """

    BOOLI = "booli"
    HEMNET = "hemnet"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SourceSettings(BaseModel):
    """Per-source URL layout and input handling."""

    base_url: str = Field(..., min_length=1, description="Scheme and host, e.g. https://www.booli.se")
    listing_path: str = Field(
        ..., min_length=1, description="Listing path template containing '{id}'"
    )
    clean_inputs: bool = Field(
        False, description="Drop scraped records that cannot describe a sale before merging"
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL without trailing slash."""
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got: {v}")
        return stripped

    @field_validator("listing_path")
    @classmethod
    def validate_listing_path(cls, v: str) -> str:
        """Require a root-relative template with an {id} placeholder."""
        stripped = v.strip()
        if not stripped.startswith("/"):
            raise ValueError(f"listing_path must start with '/', got: {v}")
        if "{id}" not in stripped:
            raise ValueError(f"listing_path must contain '{{id}}', got: {v}")
        return stripped

    def absolute_url(self, path: str) -> str:
        """Prefix a root-relative path with this source's base URL."""
        return f"{self.base_url}{path}"

    def listing_url(self, listing_id: str) -> str:
        """Build the canonical listing URL for a listing id."""
        return self.absolute_url(self.listing_path.format(id=listing_id))


DEFAULT_SOURCE_SETTINGS: Dict[SourceTag, Dict[str, Any]] = {
    SourceTag.BOOLI: {
        "base_url": "https://www.booli.se",
        "listing_path": "/annons/{id}",
        "clean_inputs": False,
    },
    SourceTag.HEMNET: {
        "base_url": "https://www.hemnet.se",
        "listing_path": "/salda/{id}",
        "clean_inputs": True,
    },
}


class SourcesConfig(BaseModel):
    """Settings for both sources; omitted keys fall back to the built-in defaults."""

    booli: SourceSettings
    hemnet: SourceSettings

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        """Merge user-provided source settings over the defaults."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return data

        merged = {}
        for tag, defaults in DEFAULT_SOURCE_SETTINGS.items():
            override = data.get(tag.value) or {}
            if isinstance(override, dict):
                merged[tag.value] = {**defaults, **override}
            else:
                merged[tag.value] = override

        unknown = set(data) - {tag.value for tag in SourceTag}
        if unknown:
            raise ValueError(f"Unknown source(s): {', '.join(sorted(unknown))}")
        return merged

    def for_tag(self, tag: SourceTag) -> SourceSettings:
        """Get the settings for one source."""
        return getattr(self, SourceTag(tag).value)


class MatchingConfig(BaseModel):
    """Tolerances and weights of the cross-source match scorer."""

    max_date_diff_days: float = Field(
        2.0, ge=0, le=30, description="Reject pairs whose sold dates differ by more days"
    )
    max_final_price_diff_pct: float = Field(
        3.0, gt=0, le=100, description="Reject pairs whose final prices differ by more percent"
    )
    max_score: float = Field(3.0, gt=0, description="Accept a best candidate at or below this score")
    date_weight: float = Field(2.0, ge=0, description="Score points per day of sold date difference")
    asking_price_divisor: float = Field(
        3.0, gt=0, description="Asking price percent difference is divided by this"
    )
    percent_change_divisor: float = Field(
        4.0, gt=0, description="Price change percent difference is divided by this"
    )
    missing_asking_price_penalty: float = Field(
        1.0, ge=0, description="Used instead of the asking price difference when it is not finite"
    )
    missing_percent_change_penalty: float = Field(
        0.5, ge=0, description="Used instead of the price change difference when it is not finite"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration object for the reconciler."""

    sources: SourcesConfig = Field(default_factory=lambda: SourcesConfig.model_validate({}))
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
