from __future__ import annotations

import os
import shutil
import stat
import subprocess
from pathlib import Path
from typing import Callable, Iterator

import pytest
from mocks.fake_invoker import FakeInvoker
from mocks.sample_patches import HELLO_PATCH

from vendorpatch.apply.config import Settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("VENDORPATCH_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project root holding ``patches/`` and a ``vendor/`` tree with one file."""

    root = tmp_path / "project"
    (root / "patches").mkdir(parents=True)
    vendor = root / "vendor"
    vendor.mkdir()
    (vendor / "hello.txt").write_text("hello\nbye\n", encoding="utf-8")
    return root


@pytest.fixture
def write_patch(project_root: Path) -> Callable[[str, str], Path]:
    def _write(name: str, body: str = HELLO_PATCH) -> Path:
        path = project_root / "patches" / name
        path.write_text(body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(project_root: Path) -> Settings:
    return Settings(root=project_root, patches_dir=Path("patches"), target_dir="vendor")


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def fake_tool(tmp_path: Path) -> Callable[[str], Path]:
    """Write an executable shell script standing in for the patch tool."""

    def _make(body: str) -> Path:
        script = tmp_path / "bin" / "fake-patch-tool"
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text("#!/bin/sh\n" + body, encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def git_project(project_root: Path) -> Path:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    subprocess.run(["git", "init", "-q", str(project_root)], check=True, capture_output=True)
    return project_root
