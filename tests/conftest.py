"""
Pytest configuration and shared fixtures.
"""

import pytest

from missioncontrol import handlers
from missioncontrol.database import JobConfidenceHistory, reset_engine, session_scope
from missioncontrol.handlers import dispatch
from missioncontrol.logger import reset_logger


class RecordingResponder:
    """Response sink that records every call it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, ok, payload, error):
        self.calls.append((ok, payload, error))

    @property
    def ok(self):
        assert len(self.calls) == 1, f"respond called {len(self.calls)} times"
        return self.calls[0][0]

    @property
    def payload(self):
        assert len(self.calls) == 1, f"respond called {len(self.calls)} times"
        return self.calls[0][1]

    @property
    def error(self):
        assert len(self.calls) == 1, f"respond called {len(self.calls)} times"
        return self.calls[0][2]


class FakeClock:
    """Millisecond clock under test control."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture(autouse=True)
def db_path(tmp_path, monkeypatch):
    """Point the shared store at a fresh database for every test."""
    path = tmp_path / "data" / "mission_control.db"
    monkeypatch.setenv("MISSION_CONTROL_DB", str(path))
    monkeypatch.delenv("MISSION_CONTROL_LOG_DIR", raising=False)
    monkeypatch.setenv("MISSION_CONTROL_LOG_LEVEL", "DEBUG")
    reset_engine()
    reset_logger()
    yield path
    reset_engine()
    reset_logger()


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    """Replace the handlers' clock with a controllable one."""
    fake = FakeClock()
    monkeypatch.setattr(handlers, "now_ms", fake)
    return fake


@pytest.fixture
def call():
    """Invoke an operation by name and return its recorded response."""
    def _call(method, params=None) -> RecordingResponder:
        recorder = RecordingResponder()
        dispatch(method, params, recorder)
        return recorder
    return _call


@pytest.fixture
def create_job(call):
    """Create a job through the create operation and return its id."""
    def _create(**params) -> str:
        response = call("missionControl.create", params)
        assert response.ok, response.error
        return response.payload["id"]
    return _create


@pytest.fixture
def store_untouched(monkeypatch):
    """Record any attempt to open the repository."""
    attempts = []

    def _no_repository():
        attempts.append(True)
        raise AssertionError("store should not be accessed")

    monkeypatch.setattr(handlers, "_repository", _no_repository)
    return attempts


@pytest.fixture
def add_confidence():
    """Write a confidence history row the way the verifier does."""
    def _add(job_id, confidence, recorded_at):
        with session_scope() as session:
            session.add(
                JobConfidenceHistory(job_id=job_id, confidence=confidence, recorded_at=recorded_at)
            )
    return _add
