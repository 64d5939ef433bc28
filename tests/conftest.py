# tests/conftest.py
import os
from pathlib import Path
from typing import Iterable, List, Set

import pytest
import structlog

from projfinder.core.detection import DetectionResult
from projfinder.core.paths import canonicalize


def create_tree(base: Path, dirs: Iterable[str]) -> Path:
    """Creates each relative directory path (and its parents) under base."""
    for rel in dirs:
        (base / rel).mkdir(parents=True, exist_ok=True)
    return base


class RecordingDetector:
    """Reports the configured directories as roots and remembers every call."""

    def __init__(self, roots: Iterable[Path] = (), failing: Iterable[Path] = ()):
        self.roots: Set[Path] = {canonicalize(r) for r in roots}
        self.failing: Set[Path] = {canonicalize(f) for f in failing}
        self.calls: List[Path] = []

    def detect(self, directory: Path) -> DetectionResult:
        self.calls.append(directory)
        if directory in self.failing:
            return DetectionResult.failed("corrupt repository metadata")
        if directory in self.roots:
            return DetectionResult.found(directory)
        return DetectionResult.not_root()


@pytest.fixture(autouse=True)
def quiet_cli_logging(monkeypatch):
    # the cli would cache loggers on first use, which hides later events from capture_logs;
    # instead keep structlog uncached and silent while a command runs.
    def fake_configure_logging(**kwargs):
        structlog.configure(logger_factory=structlog.ReturnLoggerFactory())

    monkeypatch.setattr("projfinder.cli.interface.configure_logging", fake_configure_logging)
    yield
    structlog.reset_defaults()


@pytest.fixture
def deny_access(monkeypatch):
    """Makes os.access report the given directories as unreadable."""
    denied: Set[str] = set()
    real_access = os.access

    def fake_access(path, mode, *args, **kwargs):
        if os.path.abspath(os.fspath(path)) in denied:
            return False
        return real_access(path, mode, *args, **kwargs)

    monkeypatch.setattr(os, "access", fake_access)

    def _deny(*paths: Path):
        denied.update(os.path.abspath(p) for p in paths)

    return _deny


@pytest.fixture
def deny_listing(monkeypatch):
    """Makes os.scandir raise PermissionError for the given directories."""
    denied: Set[str] = set()
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.path.abspath(os.fspath(path)) in denied:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def _deny(*paths: Path):
        denied.update(os.path.abspath(p) for p in paths)

    return _deny
