"""Evaluator settings: schema and layered loader (yaml file, book.toml table, env, CLI)"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


CONFIG_FILE = "nix-eval.yaml"
ENV_PREFIX = "NIXEVAL_"

# keys mdBook itself reads from [preprocessor.nix-eval]
_MDBOOK_KEYS = {"command", "renderer", "renderers", "before", "after", "optional"}


class ConfigError(ValueError):
    """Raised when configuration values are missing, malformed, or of the wrong type."""


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    eval_command:  str = Field(default="nix-instantiate", min_length=1, description="Evaluator binary")
    eval_args:     str = Field(default="", description="Extra evaluator arguments, space separated")
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    log_level:     str = Field(default="WARNING", description="Logging level name")

    @field_validator("eval_command", "eval_args", mode="before")
    @classmethod
    def _must_be_string(cls, v: Any) -> Any:
        if not isinstance(v, str):
            raise ValueError("Not a string")
        return v

    @field_validator("parser_config")
    @classmethod
    def _known_preset(cls, v: str) -> str:
        try:
            MarkdownIt(v)
        except KeyError:
            raise ValueError(f"unknown markdown-it preset {v!r}") from None
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")
    return data


def load_config(
    table: Optional[dict[str, Any]] = None,
    overrides: Optional[dict[str, Any]] = None,
    ) -> Settings:
    """Load Settings from nix-eval.yaml, the [preprocessor.nix-eval] table, NIXEVAL_<FIELD> env vars,
    then non-None CLI overrides (each layer beats the previous one)."""
    data = _read_config_file(Path(CONFIG_FILE))

    if table:
        data.update({k: v for k, v in table.items() if k not in _MDBOOK_KEYS})

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid nix-eval configuration: {e}") from e


def book_table(context: dict[str, Any]) -> dict[str, Any]:
    """Return the [preprocessor.nix-eval] table from an mdBook context, or {}."""
    table = (context.get("config") or {}).get("preprocessor", {}).get("nix-eval") or {}
    if not isinstance(table, dict):
        raise ConfigError("Invalid [preprocessor.nix-eval] table: expected a mapping")
    return table
