"""Runtime settings for minish."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_OPTIONAL_FIELDS = ("home", "histfile")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ShellSettings(BaseSettings):
    """Values the shell reads from its environment once at startup."""

    search_path: str = Field(default="", validation_alias="PATH", description="Executable search path")
    home: str | None = Field(default=None, validation_alias="HOME", description="Target of a bare cd")
    histfile: Path | None = Field(
        default=None, validation_alias="HISTFILE", description="History file loaded at start and written at exit"
    )
    prompt: str = Field(default="$ ", validation_alias="MINISH_PROMPT")
    log_level: str = Field(default="WARNING", validation_alias="MINISH_LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        return _blank_to_none(value)


def get_settings(**overrides: object) -> ShellSettings:
    """Build settings from the environment, applying explicit overrides.

    Overrides that are ``None`` are ignored so unset CLI flags fall back to
    the environment. A blank ``home`` or ``histfile`` override unsets it.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    for key in _OPTIONAL_FIELDS:
        if key in values:
            values[key] = _blank_to_none(values[key])
    if values.get("histfile") is not None:
        values["histfile"] = Path(str(values["histfile"]))
    return ShellSettings().model_copy(update=values)


__all__ = ["ShellSettings", "get_settings"]
