"""Save-directory resolution from layered optional overrides."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Iterable, Mapping, Optional, Protocol, Sequence

from src.config_loader import ENV_PREFIX
from src.datatypes import AppConfig

logger = logging.getLogger(__name__)

DIRECTORY_ENV_VAR: Final[str] = f"{ENV_PREFIX}DIRECTORY"
DEFAULT_DIRECTORY: Final[str] = "."

_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\$(?:(?P<name>[A-Za-z_][A-Za-z0-9_]*)|\{(?P<braced>[^}]*)\})"
)
_BRACED_NAME: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

__all__ = [
    "DIRECTORY_ENV_VAR",
    "DEFAULT_DIRECTORY",
    "PathExpansionError",
    "OverrideProvider",
    "CliOverride",
    "ConfigFileOverride",
    "EnvironmentOverride",
    "ResolvedDirectory",
    "build_override_providers",
    "expand_path",
    "resolve_directory",
    "resolve_save_directory",
]


class PathExpansionError(ValueError):
    """Raised when shell-style expansion of a directory override fails."""


class OverrideProvider(Protocol):
    """A single optional source for the save directory."""

    @property
    def label(self) -> str: ...

    def provide(self) -> Optional[str]: ...


def _clean(value: object) -> Optional[str]:
    if value is None:
        return None
    text = os.fspath(value) if isinstance(value, os.PathLike) else str(value)
    return text if text.strip() else None


@dataclass(frozen=True)
class CliOverride:
    """Directory passed on the command line."""

    value: Optional[str]
    label: str = "command line"

    def provide(self) -> Optional[str]:
        return _clean(self.value)


@dataclass(frozen=True)
class ConfigFileOverride:
    """Directory read from the persisted config file."""

    config: AppConfig
    label: str = "config file"

    def provide(self) -> Optional[str]:
        return _clean(self.config.directory)


@dataclass(frozen=True)
class EnvironmentOverride:
    """Directory taken from the ``CLIPSAVER_DIRECTORY`` environment variable."""

    environ: Mapping[str, str]
    key: str = DIRECTORY_ENV_VAR
    label: str = "environment"

    def provide(self) -> Optional[str]:
        return _clean(self.environ.get(self.key))


@dataclass(frozen=True)
class ResolvedDirectory:
    """Absolute save directory plus the source that supplied it."""

    path: Path
    source: str
    raw: str


def build_override_providers(
    cli_directory: Optional[str],
    file_config: AppConfig,
    environ: Mapping[str, str],
) -> list[OverrideProvider]:
    """Return providers in precedence order: command line, config file, environment."""

    return [
        CliOverride(cli_directory),
        ConfigFileOverride(file_config),
        EnvironmentOverride(environ),
    ]


def _home_directory(environ: Mapping[str, str]) -> str:
    home = environ.get("HOME") or environ.get("USERPROFILE")
    if home:
        return home
    try:
        return str(Path.home())
    except RuntimeError as exc:
        raise PathExpansionError(f"Cannot expand '~': home directory is unknown ({exc})") from exc


def _expand_tilde(value: str, environ: Mapping[str, str]) -> str:
    if value == "~":
        return _home_directory(environ)
    if value.startswith("~/") or value.startswith("~\\"):
        return _home_directory(environ) + value[1:]
    return value


def _expand_vars(value: str, environ: Mapping[str, str]) -> str:
    def _substitute(match: re.Match[str]) -> str:
        name = match.group("name")
        if name is None:
            name = match.group("braced")
            if not _BRACED_NAME.fullmatch(name):
                raise PathExpansionError(f"Invalid variable reference '{match.group(0)}' in '{value}'")
        try:
            return environ[name]
        except KeyError:
            raise PathExpansionError(
                f"Environment variable '{name}' referenced in '{value}' is not set"
            ) from None

    return _VAR_PATTERN.sub(_substitute, value)


def expand_path(value: str, environ: Mapping[str, str] | None = None) -> Path:
    """Expand ``~`` and ``$VAR``/``${VAR}`` references in *value* and make it absolute."""

    env = os.environ if environ is None else environ
    expanded = _expand_vars(_expand_tilde(value, env), env)
    return Path(expanded).absolute()


def resolve_directory(
    providers: Sequence[OverrideProvider] | Iterable[OverrideProvider],
    *,
    default: str = DEFAULT_DIRECTORY,
    environ: Mapping[str, str] | None = None,
) -> ResolvedDirectory:
    """Return the first present override, expanded, along with its source label."""

    chosen = default
    source = "default"
    for provider in providers:
        value = provider.provide()
        if value is not None:
            chosen = value
            source = provider.label
            break
    logger.debug("Save directory %r chosen from %s", chosen, source)
    return ResolvedDirectory(path=expand_path(chosen, environ), source=source, raw=chosen)


def resolve_save_directory(
    providers: Sequence[OverrideProvider] | Iterable[OverrideProvider],
    *,
    default: str = DEFAULT_DIRECTORY,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Fold *providers* left to right and return the expanded absolute directory."""

    return resolve_directory(providers, default=default, environ=environ).path
