"""Shared fixtures for relisten tests."""

import pytest

from relisten.session.engine import RecognitionEngine
from relisten.session.types import RecognitionError, RecognitionResult


class FakeEngine(RecognitionEngine):
    """Scripted engine: records every call and lets tests fire notifications."""

    def __init__(self, index: int, log: list[tuple[str, int]]) -> None:
        self.index = index
        self.log = log
        self.configs = []
        self.start_calls = 0
        self.stop_calls = 0
        self.on_result = None
        self.on_speech_end = None
        self.on_error = None
        self.on_end = None

    def configure(self, config) -> None:
        self.configs.append(config)
        self.log.append(("configure", self.index))

    def bind(self, on_result, on_speech_end, on_error, on_end) -> None:
        self.on_result = on_result
        self.on_speech_end = on_speech_end
        self.on_error = on_error
        self.on_end = on_end
        self.log.append(("bind", self.index))

    def start(self) -> None:
        self.start_calls += 1
        self.log.append(("start", self.index))

    def stop(self) -> None:
        self.stop_calls += 1
        self.log.append(("stop", self.index))

    # -- notifications -------------------------------------------------

    def emit_result(self, *transcripts: str) -> None:
        self.on_result([RecognitionResult.from_transcripts(*transcripts)])

    def emit_speech_end(self) -> None:
        self.on_speech_end()

    def emit_error(self, kind: str, message: str = "") -> RecognitionError:
        error = RecognitionError(error=kind, message=message)
        self.on_error(error)
        return error

    def emit_end(self) -> None:
        self.on_end()


@pytest.fixture
def engine_log() -> list[tuple[str, int]]:
    """Ordered (call, engine index) log shared by every FakeEngine."""
    return []


@pytest.fixture
def engines() -> list[FakeEngine]:
    """Every FakeEngine the factory has built, oldest first."""
    return []


@pytest.fixture
def engine_factory(engines, engine_log):
    """Factory building a new FakeEngine per call."""

    def _create() -> FakeEngine:
        engine = FakeEngine(len(engines), engine_log)
        engines.append(engine)
        return engine

    return _create


@pytest.fixture
def notifications() -> list[tuple]:
    """Ordered caller notifications: ("result", value) or ("error", error)."""
    return []


@pytest.fixture
def on_result(notifications):
    return lambda result: notifications.append(("result", result))


@pytest.fixture
def on_error(notifications):
    return lambda error: notifications.append(("error", error))
