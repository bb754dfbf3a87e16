"""Shared fixtures for the monime test suite."""

from __future__ import annotations

from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from monime.cancellation import CancelToken, TimerScheduler
from monime.config import ClientConfig
from monime.http_client import MonimeHttpClient


# ---------------------------------------------------------------------------
# Constants reused across tests
# ---------------------------------------------------------------------------

TEST_BASE_URL = "https://api.monime.test"
TEST_SPACE_ID = "spc-test123"
TEST_ACCESS_TOKEN = "mon_test_TOKEN123456"


def api_url(path: str) -> str:
    return f"{TEST_BASE_URL}/v1{path}"


class RecordingScheduler(TimerScheduler):
    """Real timers, but retry waits are recorded instead of slept."""

    def __init__(self) -> None:
        super().__init__()
        self.sleeps: List[float] = []

    def sleep(self, seconds: float, token: Optional[CancelToken] = None) -> bool:
        self.sleeps.append(seconds)
        return token.cancelled if token is not None else False


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def env_clean(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep real credentials and ~/.monime/config.yaml out of every test."""
    for name in (
        "MONIME_SPACE_ID",
        "MONIME_ACCESS_TOKEN",
        "MONIME_BASE_URL",
        "MONIME_TIMEOUT",
        "MONIME_RETRIES",
        "MONIME_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


def make_config(**overrides) -> ClientConfig:
    values = {
        "space_id": TEST_SPACE_ID,
        "access_token": TEST_ACCESS_TOKEN,
        "base_url": TEST_BASE_URL,
        "timeout": 5.0,
        "retries": 2,
        "retry_delay": 0.1,
        "retry_backoff": 2.0,
    }
    values.update(overrides)
    return ClientConfig(**values)


@pytest.fixture()
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture()
def rng() -> MagicMock:
    """Jitter source pinned to 0.25 of the jitter range."""
    source = MagicMock()
    source.random.return_value = 0.25
    return source


@pytest.fixture()
def http(scheduler: RecordingScheduler, rng: MagicMock) -> MonimeHttpClient:
    """Executor with 2 retries whose backoff waits are recorded, not slept."""
    return MonimeHttpClient(make_config(), scheduler=scheduler, rng=rng)
