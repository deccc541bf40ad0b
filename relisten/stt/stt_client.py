"""OpenAI Whisper API HTTP client with health checking and error classification.

Sends one captured utterance to the Whisper speech-to-text API and returns
the transcript. Failures are raised as ``TranscriptionError`` carrying a
recognition error kind, so the engine can tell transient network trouble
from a misconfigured or refused service.
"""

import io
import logging
import time
import wave

import httpx

from relisten.config import (
    AUDIO_SAMPLE_RATE,
    STT_API_KEY,
    STT_BASE_URL,
    STT_HEALTH_CHECK_INTERVAL,
    STT_MODEL,
    STT_TIMEOUT,
)
from relisten.session.types import ErrorKind

logger = logging.getLogger(__name__)

_AUTH_STATUSES = (401, 403)


class TranscriptionError(Exception):
    """A transcription attempt failed with a recognition error kind."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message


def _status_kind(status_code: int) -> ErrorKind:
    """Map an HTTP error status to a recognition error kind."""
    if status_code in _AUTH_STATUSES:
        return ErrorKind.SERVICE_NOT_ALLOWED
    if status_code == 429 or status_code >= 500:
        return ErrorKind.NETWORK
    return ErrorKind.ABORTED


class STTClient:
    """OpenAI Whisper API HTTP client with health checking and graceful degradation."""

    def __init__(self) -> None:
        self._available: bool = False
        self._unavailable_kind: ErrorKind = ErrorKind.SERVICE_NOT_ALLOWED
        self._last_health_check: float = 0.0
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize the HTTP client and run initial health check."""
        if not STT_API_KEY:
            self._available = False
            self._unavailable_kind = ErrorKind.SERVICE_NOT_ALLOWED
            logger.info("No STT API key, STT disabled")
            return

        self._client = httpx.AsyncClient(
            base_url=STT_BASE_URL,
            timeout=STT_TIMEOUT,
            headers={"Authorization": f"Bearer {STT_API_KEY}"},
        )
        await self._check_health()

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._available = False

    @property
    def is_available(self) -> bool:
        """Whether the Whisper API is currently available."""
        return self._available

    async def transcribe(
        self,
        audio_bytes: bytes,
        *,
        prompt: str | None = None,
        language: str | None = None,
    ) -> str:
        """Send PCM audio to the Whisper API and return the transcript text.

        Audio is wrapped in a WAV header before upload. *prompt* biases the
        model towards the session vocabulary. Raises ``TranscriptionError``
        on any failure, including an empty transcript.
        """
        await self._maybe_recheck_health()

        if not self._client:
            raise TranscriptionError(
                ErrorKind.SERVICE_NOT_ALLOWED, "STT client not started"
            )
        if not self._available:
            raise TranscriptionError(self._unavailable_kind, "Whisper API unavailable")

        data = {"model": STT_MODEL}
        if prompt:
            data["prompt"] = prompt
        if language:
            data["language"] = language

        try:
            wav_buffer = self._wrap_wav(audio_bytes)
            response = await self._client.post(
                "/v1/audio/transcriptions",
                data=data,
                files={"file": ("audio.wav", wav_buffer, "audio/wav")},
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Whisper API returned status %d", status)
            raise TranscriptionError(_status_kind(status), f"HTTP {status}") from exc
        except httpx.TransportError as exc:
            logger.warning("Whisper API request failed: %s", exc)
            raise TranscriptionError(ErrorKind.NETWORK, str(exc)) from exc
        except ValueError as exc:
            logger.warning("Whisper API returned an unreadable body", exc_info=True)
            raise TranscriptionError(ErrorKind.ABORTED, "invalid response") from exc

        transcript = result.get("text", "").strip()
        if not transcript:
            raise TranscriptionError(ErrorKind.NO_MATCH, "empty transcript")
        logger.debug("STT transcript: %s", transcript)
        return transcript

    async def _check_health(self) -> None:
        """Validate API key via GET /v1/models."""
        self._last_health_check = time.monotonic()
        if not self._client:
            self._available = False
            return
        try:
            resp = await self._client.get("/v1/models")
            if resp.status_code == 200:
                self._available = True
                logger.info(
                    "STT (Whisper) available at %s (model: %s)",
                    STT_BASE_URL,
                    STT_MODEL,
                )
            else:
                self._available = False
                self._unavailable_kind = _status_kind(resp.status_code)
                logger.warning(
                    "Whisper API returned status %d, STT unavailable",
                    resp.status_code,
                )
        except (httpx.ConnectError, httpx.TimeoutException, OSError) as exc:
            self._available = False
            self._unavailable_kind = ErrorKind.NETWORK
            logger.warning(
                "Whisper API not available at %s, STT disabled: %s",
                STT_BASE_URL,
                exc,
            )

    async def _maybe_recheck_health(self) -> None:
        """Re-check Whisper availability if enough time has passed."""
        if not self._available:
            elapsed = time.monotonic() - self._last_health_check
            if elapsed >= STT_HEALTH_CHECK_INTERVAL:
                await self._check_health()

    @staticmethod
    def _wrap_wav(pcm_bytes: bytes, sample_rate: int = AUDIO_SAMPLE_RATE) -> io.BytesIO:
        """Wrap raw PCM int16 bytes in a WAV header."""
        buf = io.BytesIO()
        with wave.open(buf, "wb") as wf:
            wf.setnchannels(1)
            wf.setsampwidth(2)  # 16-bit
            wf.setframerate(sample_rate)
            wf.writeframes(pcm_bytes)
        buf.seek(0)
        return buf
