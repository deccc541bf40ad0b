"""Configuration constants and helpers for relisten."""

import os


def _env_float(name: str, default: float) -> float:
    """Return *name* from the environment as a float, or *default*."""
    raw = os.environ.get(name)
    if raw is not None:
        try:
            return float(raw)
        except ValueError:
            return default
    return default


def _env_int(name: str, default: int) -> int:
    """Return *name* from the environment as an int, or *default*."""
    raw = os.environ.get(name)
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            return default
    return default


# --- Session configuration ---

LOCALE: str = os.environ.get("RELISTEN_LOCALE", "en-US")
GRAMMAR_WEIGHT: float = 1.0
MAX_ALTERNATIVES: int = 1


# --- Whisper STT configuration ---

STT_API_KEY: str = os.environ.get("RELISTEN_STT_API_KEY", "")
STT_BASE_URL: str = os.environ.get("RELISTEN_STT_BASE_URL", "https://api.openai.com")
STT_MODEL: str = os.environ.get("RELISTEN_STT_MODEL", "whisper-1")
STT_TIMEOUT: float = _env_float("RELISTEN_STT_TIMEOUT", 10.0)
STT_HEALTH_CHECK_INTERVAL: float = _env_float(
    "RELISTEN_STT_HEALTH_CHECK_INTERVAL", 60.0
)


# --- Audio capture configuration ---

AUDIO_SAMPLE_RATE: int = _env_int("RELISTEN_AUDIO_SAMPLE_RATE", 16000)
STT_LISTEN_TIMEOUT: float = _env_float("RELISTEN_LISTEN_TIMEOUT", 8.0)
STT_MAX_RECORD_DURATION: float = _env_float("RELISTEN_MAX_RECORD_DURATION", 10.0)
STT_SILENCE_DURATION: float = _env_float("RELISTEN_SILENCE_DURATION", 0.8)
STT_SILENCE_THRESHOLD: float = _env_float("RELISTEN_SILENCE_THRESHOLD", 0.02)
STT_FAILURE_DELAY: float = _env_float(
    "RELISTEN_FAILURE_DELAY", 1.0
)  # Seconds to wait before reporting a failed attempt.
