"""Runner orchestration tests driven through injected collaborators."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

import clipsaver
from src.clipsaver.cli_runtime import (
    STEP_CLIPBOARD,
    STEP_CONFIG,
    STEP_CONFIGURE,
    STEP_DIRECTORY,
    STEP_VALIDATION,
    STEP_WRITE,
    CLIAppError,
)
from src.clipsaver.clipboard import ImageValidationError, PixelImage
from src.clipsaver.runner import RunDependencies, RunRequest, default_run_dependencies, run
from src.config_loader import load_config
from tests.helpers.clipboard_env import (
    FIXED_MOMENT,
    FakeClipboardBackend,
    fixed_clock,
    make_dependencies,
    make_pil_image,
    make_truncated_png,
    write_config_text,
)

EXPECTED_NAME = "Clipboard 2024-01-02_03.04.05.png"


def test_capture_writes_png_into_cli_directory(
    config_dir: Path, save_root: Path, image_backend: FakeClipboardBackend
) -> None:
    deps = make_dependencies(config_dir, backend=image_backend)

    result = run(RunRequest(directory=str(save_root)), dependencies=deps)

    assert result.action == "capture"
    assert result.path == save_root / EXPECTED_NAME
    assert result.directory_source == "command line"
    assert result.image_size == (4, 3)
    with Image.open(result.path) as saved:
        assert saved.size == (4, 3)
        assert saved.mode == "RGBA"
    assert image_backend.released == 1


def test_capture_uses_config_file_then_environment(
    config_dir: Path, tmp_path: Path
) -> None:
    write_config_text(config_dir, f'directory = "{(tmp_path / "from-file").as_posix()}"\n')
    deps = make_dependencies(config_dir, environ={"CLIPSAVER_DIRECTORY": str(tmp_path / "from-env")})

    result = run(RunRequest(), dependencies=deps)

    assert result.path == tmp_path / "from-file" / EXPECTED_NAME
    assert result.directory_source == "config file"


def test_capture_falls_back_to_environment(config_dir: Path, tmp_path: Path) -> None:
    deps = make_dependencies(config_dir, environ={"CLIPSAVER_DIRECTORY": str(tmp_path / "from-env")})
    result = run(RunRequest(), dependencies=deps)
    assert result.path == tmp_path / "from-env" / EXPECTED_NAME


def test_capture_defaults_to_working_directory(
    config_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    result = run(RunRequest(), dependencies=make_dependencies(config_dir))
    assert result.path == workdir / EXPECTED_NAME
    assert result.path.exists()


def test_same_second_captures_share_a_filename(config_dir: Path, save_root: Path) -> None:
    first_backend = FakeClipboardBackend(make_pil_image(2, 2, color=(255, 0, 0, 255)))
    second_backend = FakeClipboardBackend(make_pil_image(2, 2, color=(0, 0, 255, 255)))
    first = run(
        RunRequest(directory=str(save_root)),
        dependencies=make_dependencies(
            config_dir, backend=first_backend, moment=datetime(2024, 1, 2, 3, 4, 5, 100)
        ),
    )
    second = run(
        RunRequest(directory=str(save_root)),
        dependencies=make_dependencies(
            config_dir, backend=second_backend, moment=datetime(2024, 1, 2, 3, 4, 5, 900_000)
        ),
    )

    assert first.path == second.path
    assert [entry.name for entry in save_root.iterdir()] == [EXPECTED_NAME]
    with Image.open(second.path) as saved:
        assert saved.convert("RGBA").getpixel((0, 0)) == (0, 0, 255, 255)


def test_save_directory_writes_config_without_capturing(config_dir: Path) -> None:
    backend = FakeClipboardBackend(make_pil_image())
    deps = make_dependencies(config_dir, backend=backend)

    result = run(RunRequest(save_directory="~/Pictures/clips"), dependencies=deps)

    assert result.action == "configure"
    assert result.path == config_dir / "config.toml"
    assert load_config(str(result.path)).directory == "~/Pictures/clips"
    assert backend.acquired == 0


def test_save_directory_with_control_characters_keeps_config_loadable(
    config_dir: Path, save_root: Path
) -> None:
    configured = run(RunRequest(save_directory="/tmp/a\nb"), dependencies=make_dependencies(config_dir))
    assert load_config(str(configured.path)).directory == "/tmp/a\nb"

    result = run(RunRequest(directory=str(save_root)), dependencies=make_dependencies(config_dir))
    assert result.path == save_root / EXPECTED_NAME


def test_blank_save_directory_is_rejected(config_dir: Path) -> None:
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(save_directory="  "), dependencies=make_dependencies(config_dir))
    assert excinfo.value.step == STEP_CONFIGURE
    assert not (config_dir / "config.toml").exists()


def test_save_directory_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")
    deps = make_dependencies(blocker / "clipsaver")
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(save_directory="/tmp/x"), dependencies=deps)
    assert excinfo.value.step == STEP_CONFIGURE
    assert str(excinfo.value).startswith("Failed to save configuration")


def test_invalid_config_is_reported_as_config_step(config_dir: Path, save_root: Path) -> None:
    write_config_text(config_dir, "unknown = 1\n")
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(directory=str(save_root)), dependencies=make_dependencies(config_dir))
    assert excinfo.value.step == STEP_CONFIG


def test_expansion_failure_is_reported_as_directory_step(config_dir: Path) -> None:
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(directory="$UNSET_VARIABLE/shots"), dependencies=make_dependencies(config_dir))
    assert excinfo.value.step == STEP_DIRECTORY
    assert "UNSET_VARIABLE" in str(excinfo.value)


def test_no_image_is_distinct_from_write_error(config_dir: Path, tmp_path: Path) -> None:
    no_image_deps = make_dependencies(config_dir, backend=FakeClipboardBackend(None))
    with pytest.raises(CLIAppError) as no_image:
        run(RunRequest(directory=str(tmp_path / "ok")), dependencies=no_image_deps)

    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")
    with pytest.raises(CLIAppError) as write_failure:
        run(RunRequest(directory=str(blocker)), dependencies=make_dependencies(config_dir))

    assert no_image.value.step == STEP_CLIPBOARD
    assert str(no_image.value).startswith("No image on clipboard")
    assert write_failure.value.step == STEP_WRITE
    assert str(write_failure.value).startswith("Failed to write image")
    assert no_image.value.code == write_failure.value.code == 1


def test_unavailable_clipboard_is_reported(config_dir: Path, save_root: Path) -> None:
    backend = FakeClipboardBackend(acquire_error=OSError("no clipboard service"))
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(directory=str(save_root)), dependencies=make_dependencies(config_dir, backend=backend))
    assert excinfo.value.step == STEP_CLIPBOARD
    assert str(excinfo.value).startswith("Clipboard unavailable")
    assert not save_root.exists()


def test_validation_failure_is_reported_and_nothing_written(config_dir: Path, save_root: Path) -> None:
    def _bad_reader() -> PixelImage:
        raise ImageValidationError("expected 24 bytes, got 23")

    deps = RunDependencies(
        clipboard_reader=_bad_reader,
        clock=fixed_clock(FIXED_MOMENT),
        environ={},
        config_dir=config_dir,
    )
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(directory=str(save_root)), dependencies=deps)
    assert excinfo.value.step == STEP_VALIDATION
    assert str(excinfo.value).startswith("Invalid clipboard image")
    assert not save_root.exists()


def test_truncated_clipboard_image_is_reported_as_validation(
    config_dir: Path, save_root: Path
) -> None:
    backend = FakeClipboardBackend(make_truncated_png())
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(directory=str(save_root)), dependencies=make_dependencies(config_dir, backend=backend))
    assert excinfo.value.step == STEP_VALIDATION
    assert str(excinfo.value).startswith("Invalid clipboard image")
    assert backend.released == 1
    assert not save_root.exists()


def test_unrepresentable_save_directory_is_reported_as_write_step(config_dir: Path) -> None:
    write_config_text(config_dir, 'directory = "/tmp/a\\u0000b"\n')
    with pytest.raises(CLIAppError) as excinfo:
        run(RunRequest(), dependencies=make_dependencies(config_dir))
    assert excinfo.value.step == STEP_WRITE
    assert str(excinfo.value).startswith("Failed to write image")


def test_default_dependencies_follow_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(sys, "platform", "linux")
    deps = default_run_dependencies(environ={"XDG_CONFIG_HOME": str(tmp_path)})
    assert deps.environ == {"XDG_CONFIG_HOME": str(tmp_path)}
    assert deps.config_dir == tmp_path / "clipsaver"
    assert deps.clock == datetime.now


def test_run_cli_shim_delegates_to_runner(config_dir: Path, save_root: Path) -> None:
    result = clipsaver.run_cli(str(save_root), dependencies=make_dependencies(config_dir))
    assert result.path == save_root / EXPECTED_NAME
