"""Single-shot recognition engine built on the microphone and the Whisper API.

Each ``start()`` runs one attempt as an asyncio task on the running loop:
capture one utterance, send it to Whisper, report the transcript. Every
notification is delivered on the loop thread, and every attempt ends with
exactly one ``on_end``.
"""

import asyncio
import logging
import threading
from collections.abc import Callable

from relisten.config import STT_FAILURE_DELAY
from relisten.session.engine import (
    EndHandler,
    EngineFactory,
    ErrorHandler,
    RecognitionEngine,
    ResultHandler,
    SpeechEndHandler,
)
from relisten.session.types import (
    EngineConfig,
    ErrorKind,
    RecognitionError,
    RecognitionResult,
)
from relisten.stt.microphone import MicrophoneCapture
from relisten.stt.stt_client import STTClient, TranscriptionError

logger = logging.getLogger(__name__)


class WhisperEngine(RecognitionEngine):
    """One utterance per attempt: microphone capture, then Whisper transcription.

    The microphone and client are shared, long-lived resources owned by the
    caller. Engines are cheap and are thrown away on every full restart.
    """

    def __init__(
        self,
        microphone: MicrophoneCapture,
        stt_client: STTClient,
        *,
        failure_delay: float | None = None,
    ) -> None:
        self._microphone = microphone
        self._stt_client = stt_client
        self._failure_delay = STT_FAILURE_DELAY if failure_delay is None else failure_delay

        self._config: EngineConfig | None = None
        self._on_result: ResultHandler | None = None
        self._on_speech_end: SpeechEndHandler | None = None
        self._on_error: ErrorHandler | None = None
        self._on_end: EndHandler | None = None

        self._task: asyncio.Task | None = None
        self._cancel = threading.Event()

    def configure(self, config: EngineConfig) -> None:
        if config.continuous:
            logger.warning("Continuous mode is not supported, running single-shot")
        self._config = config

    def bind(
        self,
        on_result: ResultHandler,
        on_speech_end: SpeechEndHandler,
        on_error: ErrorHandler,
        on_end: EndHandler,
    ) -> None:
        self._on_result = on_result
        self._on_speech_end = on_speech_end
        self._on_error = on_error
        self._on_end = on_end

    def start(self) -> None:
        """Schedule one attempt. Raises RuntimeError outside a running event loop."""
        if self.is_running:
            logger.debug("Recognition attempt already running, ignoring start()")
            return

        loop = asyncio.get_running_loop()
        self._cancel = threading.Event()
        self._task = loop.create_task(self._run_attempt())

    def stop(self) -> None:
        """Stop capturing. Audio already heard is still transcribed."""
        if self.is_running:
            self._cancel.set()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Attempt
    # ------------------------------------------------------------------

    async def _run_attempt(self) -> None:
        try:
            error = await self._recognise()
        except asyncio.CancelledError:
            logger.debug("Recognition attempt cancelled")
            raise
        except Exception as exc:
            logger.warning("Recognition attempt failed", exc_info=True)
            error = RecognitionError(error=ErrorKind.ABORTED.value, message=str(exc))

        if error is not None:
            # Keeps an always-on session from spinning on a dead device or service.
            if self._failure_delay > 0:
                await asyncio.sleep(self._failure_delay)
            self._emit(self._on_error, error)

        # The end handler may start the next attempt on this engine.
        self._task = None
        self._emit(self._on_end)

    async def _recognise(self) -> RecognitionError | None:
        """Run capture and transcription, returning the error to report, if any."""
        if not self._microphone.is_available:
            return RecognitionError(
                error=ErrorKind.AUDIO_CAPTURE.value,
                message="No microphone input device",
            )

        audio = await self._microphone.capture_until_silence(self._cancel)
        if not audio:
            if self._cancel.is_set():
                logger.debug("Attempt stopped before any speech was heard")
                return None
            return RecognitionError(
                error=ErrorKind.NO_SPEECH.value, message="No speech detected"
            )

        self._emit(self._on_speech_end)

        config = self._config
        try:
            transcript = await self._stt_client.transcribe(
                audio,
                prompt=", ".join(config.vocabulary) if config else None,
                language=config.language if config else None,
            )
        except TranscriptionError as exc:
            return RecognitionError(error=exc.kind.value, message=exc.message)

        self._emit(self._on_result, [RecognitionResult.from_transcripts(transcript)])
        return None

    @staticmethod
    def _emit(handler: Callable | None, *args) -> None:
        if handler is not None:
            handler(*args)


def whisper_engine_factory(
    microphone: MicrophoneCapture,
    stt_client: STTClient,
    *,
    failure_delay: float | None = None,
) -> EngineFactory:
    """Return a factory building WhisperEngines over shared audio resources."""

    def _create() -> RecognitionEngine:
        logger.debug("Creating Whisper recognition engine")
        return WhisperEngine(microphone, stt_client, failure_delay=failure_delay)

    return _create
