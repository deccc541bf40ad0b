"""Speech session state machine and its engine interface."""

from relisten.session.engine import EngineFactory, RecognitionEngine
from relisten.session.grammar import build_grammar, normalize_transcript
from relisten.session.speech_session import SpeechSession
from relisten.session.types import (
    EngineConfig,
    ErrorKind,
    RecognitionAlternative,
    RecognitionError,
    RecognitionResult,
    RecoveryReason,
    SessionState,
)

__all__ = [
    "EngineConfig",
    "EngineFactory",
    "ErrorKind",
    "RecognitionAlternative",
    "RecognitionEngine",
    "RecognitionError",
    "RecognitionResult",
    "RecoveryReason",
    "SessionState",
    "SpeechSession",
    "build_grammar",
    "normalize_transcript",
]
