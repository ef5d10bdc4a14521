"""
Pytest configuration and shared fixtures for diawi-upload tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from diawi_upload.logging import SilentLogger, set_global_logger


class RecordingLogger:
    """Logger that keeps every message for later assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.records.append(("step", f"{step}/{total}", message))

    def info(self, prefix: str, message: str) -> None:
        self.records.append(("info", prefix, message))

    def warning(self, prefix: str, message: str) -> None:
        self.records.append(("warning", prefix, message))

    def verbose(self, prefix: str, message: str) -> None:
        self.records.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.records.append(("debug", prefix, message))

    def messages(self, level: str) -> list[str]:
        return [msg for lvl, _, msg in self.records if lvl == level]


class FakeSleep:
    """Records requested waits instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch):
    """
    Run every test in an empty working directory with no DIAWI_* variables.

    Keeps a developer's diawi.yaml, .env or exported token out of the tests
    and resets the global logger afterwards.
    """
    monkeypatch.chdir(tmp_path)
    for name in [
        "DIAWI_TOKEN",
        "DIAWI_FILE",
        "DIAWI_FIND_BY_UDID",
        "DIAWI_WALL_OF_APPS",
        "DIAWI_PASSWORD",
        "DIAWI_COMMENT",
        "DIAWI_CALLBACK_URL",
        "DIAWI_CALLBACK_EMAILS",
        "DIAWI_INSTALLATION_NOTIFICATIONS",
    ]:
        monkeypatch.delenv(name, raising=False)
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def ipa_file(tmp_test_dir: Path) -> Path:
    """Provide a small fake .ipa on disk."""
    path = tmp_test_dir / "build" / "MyApp.ipa"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"PK\x03\x04fake-ipa-content")
    return path


@pytest.fixture
def apk_file(tmp_test_dir: Path) -> Path:
    """Provide a small fake .apk on disk."""
    path = tmp_test_dir / "build" / "app-release.apk"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"PK\x03\x04fake-apk-content")
    return path


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("diawi.yaml", {"comment": "nightly"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create

