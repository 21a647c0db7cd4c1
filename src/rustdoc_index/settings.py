"""Runtime settings with typed configuration and fail-fast validation.

:class:`IndexSettings` reads ``RUSTDOC_INDEX_*`` environment variables via
pydantic-settings. Validation failures surface as :class:`SettingsError`.

Examples
--------
>>> from rustdoc_index.settings import load_settings
>>> settings = load_settings(reference_base=1)
>>> settings.export_name
'searchIndex'
"""

from __future__ import annotations

from typing import Final

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rustdoc_index.errors import SettingsError
from rustdoc_index.logging import get_logger

__all__ = [
    "DEFAULT_EXPORT_NAME",
    "IndexSettings",
    "load_settings",
]

logger = get_logger(__name__)

DEFAULT_EXPORT_NAME: Final[str] = "searchIndex"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class IndexSettings(BaseSettings):
    """Loader and CLI configuration (``RUSTDOC_INDEX_*`` namespace)."""

    model_config = SettingsConfigDict(
        env_prefix="RUSTDOC_INDEX_",
        extra="forbid",
        case_sensitive=False,
    )

    export_name: str = Field(
        default=DEFAULT_EXPORT_NAME,
        min_length=1,
        description="Name the parsed table is exported under in a host namespace",
    )
    reference_base: int | None = Field(
        default=None,
        description="Base of parent/type references into 'p' (None detects it per crate)",
    )
    log_level: str = Field(
        default="WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    search_limit: int = Field(default=20, ge=1, description="Default number of search hits")

    @field_validator("reference_base")
    @classmethod
    def _check_base(cls, value: int | None) -> int | None:
        if value not in {None, 0, 1}:
            message = f"reference_base must be 0 or 1, got {value!r}"
            raise ValueError(message)
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            message = f"unknown log level {value!r}"
            raise ValueError(message)
        return level

    def __init__(self, **overrides: object) -> None:
        """Initialise settings with fail-fast validation."""
        try:
            super().__init__(**overrides)  # type: ignore[arg-type]
        except Exception as exc:
            msg = f"Configuration validation failed: {exc}"
            logger.exception(
                "Settings validation failed",
                extra={"operation": "settings", "error_type": type(exc).__name__},
            )
            raise SettingsError(
                msg,
                cause=exc,
                context={"validation_error": str(exc)},
            ) from exc


def load_settings(**overrides: object) -> IndexSettings:
    """Load :class:`IndexSettings` with optional overrides.

    Parameters
    ----------
    **overrides : object
        Field values taking precedence over the environment.

    Returns
    -------
    IndexSettings
        Validated settings.
    """
    return IndexSettings(**overrides)
