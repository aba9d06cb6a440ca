"""Config-location and loading helpers run before a capture."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Final, Mapping

from rich.markup import escape

from src.clipsaver.cli_runtime import STEP_CONFIG, CLIAppError
from src.clipsaver.directory import PathExpansionError, build_override_providers, resolve_directory
from src.config_loader import ConfigError, load_config
from src.datatypes import AppConfig

logger = logging.getLogger(__name__)

APP_DIR_NAME: Final[str] = "clipsaver"
CONFIG_FILENAME: Final[str] = "config.toml"

__all__ = [
    "APP_DIR_NAME",
    "CONFIG_FILENAME",
    "PreflightResult",
    "resolve_config_home",
    "resolve_config_dir",
    "resolve_config_path",
    "prepare_preflight",
    "fresh_app_config",
    "is_writable_path",
    "collect_path_diagnostics",
]


@dataclass
class PreflightResult:
    """Resolved configuration and config-file location used during startup."""

    config_path: Path
    file_config: AppConfig
    config_exists: bool
    warnings: tuple[str, ...] = ()


def resolve_config_home(
    environ: Mapping[str, str] | None = None,
    *,
    platform: str | None = None,
) -> Path:
    """Return the per-user configuration root, falling back to the working directory."""

    env = os.environ if environ is None else environ
    platform = platform or sys.platform

    candidate: Path | None = None
    if platform.startswith("win"):
        appdata = env.get("APPDATA")
        if appdata:
            candidate = Path(appdata)
    elif platform == "darwin":
        home = env.get("HOME")
        if home:
            candidate = Path(home) / "Library" / "Application Support"
    else:
        xdg = env.get("XDG_CONFIG_HOME")
        if xdg and Path(xdg).is_absolute():
            candidate = Path(xdg)
        else:
            home = env.get("HOME")
            if home:
                candidate = Path(home) / ".config"

    if candidate is None:
        logger.debug("No config home found in environment; using working directory")
        return Path.cwd()
    return candidate


def resolve_config_dir(
    environ: Mapping[str, str] | None = None,
    *,
    platform: str | None = None,
) -> Path:
    return resolve_config_home(environ, platform=platform) / APP_DIR_NAME


def resolve_config_path(config_dir: Path) -> Path:
    return config_dir / CONFIG_FILENAME


def fresh_app_config() -> AppConfig:
    """Return an AppConfig populated with built-in defaults."""

    return AppConfig()


def _config_error(detail: str) -> CLIAppError:
    return CLIAppError(
        f"Configuration error: {detail}",
        code=1,
        rich_message=f"[red]Configuration error:[/red] {escape(detail)}",
        step=STEP_CONFIG,
    )


def prepare_preflight(*, config_dir: Path) -> PreflightResult:
    """Load the persisted config from *config_dir*, falling back to defaults when it is missing."""

    config_path = resolve_config_path(config_dir)
    logger.debug("Looking for config in %s", config_dir)
    warnings: list[str] = []

    try:
        path_text = os.fspath(config_path)
        path_text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise _config_error(f"config path {config_path!r} cannot be represented as text") from exc

    config_exists = True
    file_cfg: AppConfig
    try:
        file_cfg = load_config(path_text)
    except FileNotFoundError:
        config_exists = False
        file_cfg = fresh_app_config()
        warnings.append(f"Config file not found; using defaults at {config_path}")
    except IsADirectoryError as exc:
        raise _config_error(f"config path {config_path} is a directory") from exc
    except PermissionError as exc:
        raise _config_error(f"config file is not readable: {config_path}") from exc
    except OSError as exc:
        raise _config_error(f"failed to read config file: {exc}") from exc
    except ConfigError as exc:
        raise _config_error(f"invalid configuration in {config_path}: {exc}") from exc

    return PreflightResult(
        config_path=config_path,
        file_config=file_cfg,
        config_exists=config_exists,
        warnings=tuple(warnings),
    )


def _nearest_existing_dir(path: Path) -> Path:
    """Return the nearest existing directory for *path* (itself or ancestor)."""

    candidate = path
    if candidate.is_file():
        candidate = candidate.parent

    while not candidate.exists():
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return candidate


def is_writable_path(path: Path, *, for_file: bool) -> bool:
    """Return True when the given path (or its nearest parent) is writable."""

    target = path.parent if for_file else path
    probe = _nearest_existing_dir(target)
    return os.access(probe, os.W_OK)


def collect_path_diagnostics(
    *,
    cli_directory: str | None,
    config_dir: Path,
    environ: Mapping[str, str],
) -> Dict[str, Any]:
    """Return a JSON-serialisable mapping describing the config file and save directory."""

    preflight = prepare_preflight(config_dir=config_dir)
    providers = build_override_providers(cli_directory, preflight.file_config, environ)
    diagnostics: Dict[str, Any] = {
        "config_path": str(preflight.config_path),
        "config_exists": preflight.config_exists,
        "save_directory": None,
        "save_directory_source": None,
        "warnings": list(preflight.warnings),
    }
    try:
        resolved = resolve_directory(providers, environ=environ)
    except PathExpansionError as exc:
        diagnostics["warnings"].append(str(exc))
        diagnostics["writable"] = {
            "config_dir": is_writable_path(preflight.config_path, for_file=True),
            "save_directory": False,
        }
        return diagnostics

    diagnostics["save_directory"] = str(resolved.path)
    diagnostics["save_directory_source"] = resolved.source
    diagnostics["writable"] = {
        "config_dir": is_writable_path(preflight.config_path, for_file=True),
        "save_directory": is_writable_path(resolved.path, for_file=False),
    }
    return diagnostics
