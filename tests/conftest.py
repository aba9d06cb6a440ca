from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

import src.clipsaver.cli_entry as cli_entry_module
from src.clipsaver.runner import RunDependencies
from tests.helpers.clipboard_env import FakeClipboardBackend, make_dependencies, make_pil_image


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Per-test config directory that does not exist until something writes to it."""

    return tmp_path / "config" / "clipsaver"


@pytest.fixture
def save_root(tmp_path: Path) -> Path:
    return tmp_path / "shots"


@pytest.fixture
def image_backend() -> FakeClipboardBackend:
    """Clipboard double holding a small RGBA image."""

    return FakeClipboardBackend(make_pil_image(4, 3))


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Click runner configured for CLI smoke tests."""

    return CliRunner()


@pytest.fixture
def install_cli_dependencies(
    monkeypatch: pytest.MonkeyPatch,
    config_dir: Path,
) -> Callable[..., RunDependencies]:
    """Return a helper that makes the CLI use fake collaborators instead of the real clipboard."""

    def _install(
        backend: FakeClipboardBackend | None = None,
        **kwargs: Any,
    ) -> RunDependencies:
        deps = make_dependencies(config_dir, backend=backend, **kwargs)
        monkeypatch.setattr(cli_entry_module, "default_run_dependencies", lambda: deps)
        return deps

    return _install
