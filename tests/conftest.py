import os
from pathlib import Path

import pytest

from minish import Shell, ShellSettings


def make_executable(directory: Path, name: str, body: str = "exit 0\n") -> Path:
    path = directory / name
    path.write_text(f"#!/bin/sh\n{body}")
    path.chmod(0o755)
    return path


def make_settings(**values: object) -> ShellSettings:
    defaults: dict[str, object] = {
        "search_path": os.environ.get("PATH", "/usr/bin:/bin"),
        "home": None,
        "histfile": None,
    }
    defaults.update(values)
    return ShellSettings().model_copy(update=defaults)


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "bin"
    directory.mkdir()
    return directory


@pytest.fixture
def shell(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Shell:
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return Shell(make_settings(home=str(tmp_path)))
