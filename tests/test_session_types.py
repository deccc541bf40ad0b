"""Tests for relisten.session.types -- session models and enums."""

import json

import pytest
from pydantic import ValidationError

from relisten.session.types import (
    EngineConfig,
    ErrorKind,
    RecognitionAlternative,
    RecognitionError,
    RecognitionResult,
    RecoveryReason,
    SessionState,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TestSessionState:

    def test_values(self):
        assert SessionState.IDLE == "idle"
        assert SessionState.LISTENING == "listening"
        assert SessionState.RECOVERING == "recovering"

    def test_enum_has_exactly_three_members(self):
        assert len(SessionState) == 3


class TestRecoveryReason:

    def test_values(self):
        assert RecoveryReason.TRANSIENT == "transient"
        assert RecoveryReason.FULL_RESTART == "full_restart"


class TestErrorKind:

    def test_web_speech_names(self):
        assert ErrorKind.NETWORK == "network"
        assert ErrorKind.NO_SPEECH == "no-speech"
        assert ErrorKind.ABORTED == "aborted"
        assert ErrorKind.SERVICE_NOT_ALLOWED == "service-not-allowed"


# ---------------------------------------------------------------------------
# RecognitionError
# ---------------------------------------------------------------------------


class TestRecognitionError:

    def test_network_is_transient(self):
        assert RecognitionError(error="network").is_transient is True

    @pytest.mark.parametrize("kind", ["aborted", "no-speech", "not-allowed", "other"])
    def test_other_kinds_are_not_transient(self, kind):
        assert RecognitionError(error=kind).is_transient is False

    def test_accepts_enum_value(self):
        error = RecognitionError(error=ErrorKind.NETWORK.value, message="offline")
        assert error.error == "network"
        assert error.message == "offline"

    def test_requires_error(self):
        with pytest.raises(ValidationError):
            RecognitionError()

    def test_json_round_trip(self):
        error = RecognitionError(error="network", message="offline")
        restored = RecognitionError(**json.loads(error.model_dump_json()))
        assert restored == error


# ---------------------------------------------------------------------------
# RecognitionResult
# ---------------------------------------------------------------------------


class TestRecognitionResult:

    def test_from_transcripts(self):
        result = RecognitionResult.from_transcripts("yes", "yeah")
        assert [a.transcript for a in result.alternatives] == ["yes", "yeah"]

    def test_defaults_to_no_alternatives(self):
        assert RecognitionResult().alternatives == []

    def test_alternative_requires_transcript(self):
        with pytest.raises(ValidationError):
            RecognitionAlternative()


# ---------------------------------------------------------------------------
# EngineConfig
# ---------------------------------------------------------------------------


class TestEngineConfig:

    def test_single_shot_defaults(self):
        config = EngineConfig(vocabulary=["yes"], grammar="g")
        assert config.continuous is False
        assert config.interim_results is False
        assert config.max_alternatives == 1
        assert config.grammar_weight == 1.0
        assert config.locale == "en-US"

    @pytest.mark.parametrize(
        "locale,language", [("en-US", "en"), ("de-DE", "de"), ("FR", "fr")]
    )
    def test_language(self, locale, language):
        config = EngineConfig(vocabulary=["yes"], grammar="g", locale=locale)
        assert config.language == language
