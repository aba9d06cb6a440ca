"""Configuration loader that parses and writes the user TOML config."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict

from .datatypes import AppConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLIPSAVER_"


class ConfigError(ValueError):
    """Raised when the configuration file is malformed or fails validation."""


def _sanitize_section(raw: dict[str, Any], name: str, cls):
    """
    Coerce a raw TOML table into an instance of ``cls``.

    Parameters:
        raw (dict[str, Any]): Raw TOML table.
        name (str): Section name used when reporting validation errors.
        cls: Dataclass type used to construct the section object.

    Returns:
        Any: Instantiated dataclass populated with values from ``raw``.

    Raises:
        ConfigError: If the section is not a table or contains unknown keys.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    known = {field.name for field in fields(cls)}
    unknown = sorted(key for key in raw if key not in known)
    if unknown:
        raise ConfigError(f"Unknown keys in [{name}]: {', '.join(unknown)}")
    cleaned: Dict[str, Any] = dict(raw)
    try:
        return cls(**cleaned)
    except TypeError as exc:
        raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc


def _normalise_directory(value: Any, dotted_key: str) -> str | None:
    """Return a stripped directory string, or ``None`` when blank."""

    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{dotted_key} must be a string path")
    stripped = value.strip()
    return stripped or None


def load_config(path: str) -> AppConfig:
    """
    Load and validate an application configuration from a TOML file.

    Reads the file at `path` as UTF-8 TOML (a BOM is accepted) and returns the
    validated :class:`AppConfig`.

    Raises:
        FileNotFoundError: If `path` does not exist; callers treat this as "use defaults".
        ConfigError: If the file is not UTF-8, TOML parsing fails, or a value is invalid.
    """

    with open(path, "rb") as handle:
        raw_bytes = handle.read()
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        raw = tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigError("Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse TOML: {exc}") from exc

    app = _sanitize_section(raw, "config", AppConfig)
    app.directory = _normalise_directory(app.directory, "directory")
    logger.debug("Loaded config from %s: %s", path, app)
    return app


_TOML_ESCAPES: Dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def _toml_quote(value: str) -> str:
    """Escape TOML string characters for safe inline inclusion."""
    parts: list[str] = []
    for char in value:
        escaped = _TOML_ESCAPES.get(char)
        if escaped is None and (char < " " or char == "\x7f"):
            escaped = f"\\u{ord(char):04X}"
        parts.append(escaped if escaped is not None else char)
    return "".join(parts)


def render_config_text(config: AppConfig) -> str:
    """Render *config* as TOML text, omitting unset fields."""

    lines: list[str] = []
    for field in fields(AppConfig):
        value = getattr(config, field.name)
        if value is None:
            continue
        lines.append(f'{field.name} = "{_toml_quote(str(value))}"')
    return "\n".join(lines) + "\n"


def write_config(path: Path, config: AppConfig) -> None:
    """Write *config* to *path*, creating parent directories as needed."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config_text(config), encoding="utf-8")
    logger.debug("Wrote config to %s", path)
