"""Whisper-backed speech-to-text engine for speech sessions."""

from relisten.stt.microphone import MicrophoneCapture
from relisten.stt.stt_client import STTClient, TranscriptionError
from relisten.stt.whisper_engine import WhisperEngine, whisper_engine_factory

__all__ = [
    "MicrophoneCapture",
    "STTClient",
    "TranscriptionError",
    "WhisperEngine",
    "whisper_engine_factory",
]
