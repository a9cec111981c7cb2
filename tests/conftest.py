"""Pytest configuration and fixtures for buildproof tests."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from buildproof.inclusion import Build
from buildproof.store import ContentStore, MemoryBackend
from buildproof.transforms import Concatenate

SOURCES = {"one.js": b"a", "two.js": b"b", "three.js": b"c"}

# The autouse fixtures below are function scoped but hold no per-example state.
settings.register_profile(
    "buildproof",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.load_profile("buildproof")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep BUILDPROOF_* settings from the caller's shell out of tests."""
    for name in (
        "BUILDPROOF_HOME",
        "BUILDPROOF_WORKSPACE_ROOT",
        "BUILDPROOF_ALGORITHM",
        "BUILDPROOF_STORE",
        "BUILDPROOF_STORE_PATH",
        "BUILDPROOF_OUTPUT",
        "BUILDPROOF_WORKERS",
        "BUILDPROOF_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI invocations attach handlers to streams that close after the test."""
    yield
    logger = logging.getLogger("buildproof")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return ContentStore(backend)


@pytest.fixture
def source_dir(tmp_path):
    """Directory holding one.js="a", two.js="b", three.js="c"."""
    src = tmp_path / "src"
    src.mkdir()
    for name, content in SOURCES.items():
        (src / name).write_bytes(content)
    return src


@pytest.fixture
def build(source_dir, store):
    """The illustrative concatenation build over the three sources."""
    return Build(
        sources=list(SOURCES),
        transformation=Concatenate(),
        store=store,
        root=source_dir,
    )


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A CLI workspace with .buildproof/ and the three sources, as cwd."""
    ws = tmp_path / "ws"
    ws.mkdir()
    (ws / ".buildproof").mkdir()
    for name, content in SOURCES.items():
        (ws / name).write_bytes(content)
    monkeypatch.chdir(ws)
    return ws


@pytest.fixture
def git_repo(tmp_path):
    """An empty git repository; skips when git is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    import subprocess

    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", "-q", str(repo)], check=True)
    return Path(repo)
