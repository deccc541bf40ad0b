"""Pydantic models and enums for the speech session."""

from enum import Enum

from pydantic import BaseModel, Field

from relisten.config import GRAMMAR_WEIGHT, LOCALE, MAX_ALTERNATIVES


class SessionState(str, Enum):
    """Where the session is in its attempt cycle."""

    IDLE = "idle"
    LISTENING = "listening"
    RECOVERING = "recovering"


class RecoveryReason(str, Enum):
    """What the session does once the failed attempt has ended."""

    TRANSIENT = "transient"
    FULL_RESTART = "full_restart"


class ErrorKind(str, Enum):
    """Error kinds reported by recognition engines.

    Values follow the Web Speech API ``SpeechRecognitionErrorEvent.error``
    vocabulary. Engines may report kinds outside this list.
    """

    NETWORK = "network"
    NO_SPEECH = "no-speech"
    NO_MATCH = "no-match"
    ABORTED = "aborted"
    AUDIO_CAPTURE = "audio-capture"
    NOT_ALLOWED = "not-allowed"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    BAD_GRAMMAR = "bad-grammar"
    LANGUAGE_NOT_SUPPORTED = "language-not-supported"


class RecognitionError(BaseModel):
    """An error notification from an engine, passed through to the caller as-is."""

    error: str
    message: str = ""

    @property
    def is_transient(self) -> bool:
        """Network errors are retried on the same engine instance."""
        return self.error == ErrorKind.NETWORK.value


class RecognitionAlternative(BaseModel):
    """One candidate transcript for an utterance."""

    transcript: str


class RecognitionResult(BaseModel):
    """A recognised utterance with its alternatives, best first."""

    alternatives: list[RecognitionAlternative] = Field(default_factory=list)

    @classmethod
    def from_transcripts(cls, *transcripts: str) -> "RecognitionResult":
        return cls(
            alternatives=[RecognitionAlternative(transcript=t) for t in transcripts]
        )


class EngineConfig(BaseModel):
    """Settings applied to an engine before each single-shot attempt."""

    vocabulary: list[str]
    grammar: str
    grammar_weight: float = GRAMMAR_WEIGHT
    locale: str = LOCALE
    continuous: bool = False
    interim_results: bool = False
    max_alternatives: int = MAX_ALTERNATIVES

    @property
    def language(self) -> str:
        """Primary language subtag of the locale (``"en-US"`` -> ``"en"``)."""
        return self.locale.split("-", 1)[0].lower()
