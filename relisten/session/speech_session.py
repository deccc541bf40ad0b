"""Always-on listening session over a flaky single-shot recognition engine.

Engines misbehave when run in continuous mode, so the session never asks
for it. Each attempt recognises one utterance and the session chains the
attempts itself. That leaves every recovery decision here:

- ``network`` errors are transient. The caller gets the error and then a
  ``None`` result, and the next attempt reuses the same engine.
- Any other error may have left the engine broken. It is discarded and the
  factory builds a new one before the next attempt.

Each engine gets a generation number when it is created, and its handlers
are bound to that number. Notifications from a discarded engine carry an
older generation and are dropped.
"""

import functools
import logging
from collections.abc import Callable, Iterable, Sequence

from relisten.config import LOCALE
from relisten.session.engine import EngineFactory, RecognitionEngine
from relisten.session.grammar import build_grammar, normalize_transcript, unique_vocabulary
from relisten.session.types import (
    EngineConfig,
    ErrorKind,
    RecognitionError,
    RecognitionResult,
    RecoveryReason,
    SessionState,
)

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str | None], None]
ErrorCallback = Callable[[RecognitionError], None]
StateCallback = Callable[[SessionState], None]


class SpeechSession:
    """Keeps a single-shot recognition engine listening and recovers it on failure."""

    def __init__(
        self,
        vocabulary: Iterable[str],
        always_on: bool,
        on_result: ResultCallback | None = None,
        on_error: ErrorCallback | None = None,
        *,
        engine_factory: EngineFactory,
        locale: str | None = None,
        on_state_change: StateCallback | None = None,
    ) -> None:
        words = unique_vocabulary(vocabulary)
        if not words:
            raise ValueError("SpeechSession needs at least one vocabulary word")
        if engine_factory is None:
            raise ValueError("SpeechSession needs an engine factory")

        self._vocabulary = words
        self._grammar = build_grammar(words)
        self._always_on = always_on
        self._locale = locale or LOCALE

        self._on_result = on_result
        self._on_error = on_error
        self._on_state_change = on_state_change

        self._engine_factory = engine_factory
        self._engine: RecognitionEngine | None = None
        self._generation: int = 0
        self._state: SessionState = SessionState.IDLE
        self._recovery: RecoveryReason | None = None

        self._initialise_engine()

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def start_listening(self) -> None:
        """Start one recognition attempt. No-op while an attempt is in flight."""
        if self._state is not SessionState.IDLE:
            logger.debug("Attempt already in flight, ignoring start_listening()")
            return

        if self._recovery is RecoveryReason.FULL_RESTART:
            self.restart()
            return

        self._set_state(SessionState.LISTENING)
        try:
            self._engine.configure(self._engine_config())
            self._engine.start()
        except Exception as exc:
            logger.warning(
                "Recognition engine failed to start (generation=%d)",
                self._generation,
                exc_info=True,
            )
            self._stop_engine()
            self._fail_attempt(f"Recognition engine failed to start: {exc}")

    def restart(self) -> None:
        """Replace the engine with a fresh instance and start listening again."""
        logger.warning("Speech session restarting (generation=%d)", self._generation)

        old_engine = self._engine
        try:
            self._initialise_engine()
        except Exception as exc:
            logger.warning("Recognition engine factory failed", exc_info=True)
            self._stop_engine(old_engine)
            self._fail_attempt(f"Recognition engine factory failed: {exc}")
            return
        self._stop_engine(old_engine)

        self._recovery = None
        self._set_state(SessionState.IDLE)
        self.start_listening()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def recovery(self) -> RecoveryReason | None:
        """Recovery owed once the current attempt ends, if any."""
        return self._recovery

    @property
    def is_listening(self) -> bool:
        """True from engine ``start()`` until the attempt's end notification."""
        return self._state is not SessionState.IDLE

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def engine(self) -> RecognitionEngine:
        return self._engine

    @property
    def vocabulary(self) -> tuple[str, ...]:
        return self._vocabulary

    @property
    def grammar(self) -> str:
        return self._grammar

    @property
    def always_on(self) -> bool:
        return self._always_on

    # ------------------------------------------------------------------
    # Engine lifecycle
    # ------------------------------------------------------------------

    def _initialise_engine(self) -> None:
        """Build a new engine from the factory and bind it to a new generation."""
        self._generation += 1
        generation = self._generation

        engine = self._engine_factory()
        engine.bind(
            on_result=functools.partial(self._handle_result, generation),
            on_speech_end=functools.partial(self._handle_speech_end, generation),
            on_error=functools.partial(self._handle_error, generation),
            on_end=functools.partial(self._handle_end, generation),
        )
        self._engine = engine
        logger.debug("Recognition engine created (generation=%d)", generation)

    def _engine_config(self) -> EngineConfig:
        return EngineConfig(
            vocabulary=list(self._vocabulary),
            grammar=self._grammar,
            locale=self._locale,
        )

    def _fail_attempt(self, message: str) -> None:
        """Go idle with a full restart owed and tell the caller with an ``aborted`` error.

        Nothing is retried from here. The caller decides when to call
        ``start_listening()`` again, which rebuilds the engine first.
        """
        self._recovery = RecoveryReason.FULL_RESTART
        self._set_state(SessionState.IDLE)
        error = RecognitionError(error=ErrorKind.ABORTED.value, message=message)
        self._notify(self._on_error, error, "error")

    def _stop_engine(self, engine: RecognitionEngine | None = None) -> None:
        engine = engine or self._engine
        if engine is None:
            return
        try:
            engine.stop()
        except Exception:
            logger.warning("Recognition engine stop() raised", exc_info=True)

    # ------------------------------------------------------------------
    # Engine notifications
    # ------------------------------------------------------------------

    def _is_stale(self, generation: int, event: str) -> bool:
        if generation != self._generation:
            logger.debug(
                "Ignoring %s from discarded engine (generation=%d, current=%d)",
                event,
                generation,
                self._generation,
            )
            return True
        return False

    def _handle_result(
        self, generation: int, results: Sequence[RecognitionResult]
    ) -> None:
        if self._is_stale(generation, "result"):
            return

        if not results or not results[-1].alternatives:
            logger.debug("Recognition result without alternatives, ignoring")
            return

        transcript = normalize_transcript(results[-1].alternatives[0].transcript)
        logger.info("Recognised: %s", transcript)
        self._deliver_result(transcript)

    def _handle_speech_end(self, generation: int) -> None:
        if self._is_stale(generation, "speech end"):
            return
        self._stop_engine()

    def _handle_error(self, generation: int, error: RecognitionError) -> None:
        if self._is_stale(generation, "error"):
            return

        # Recovery is recorded before stop(), which may end the attempt.
        if not error.is_transient:
            self._recovery = RecoveryReason.FULL_RESTART
        elif self._recovery is None and self._state is not SessionState.IDLE:
            self._recovery = RecoveryReason.TRANSIENT

        if self._state is SessionState.LISTENING:
            self._set_state(SessionState.RECOVERING)

        # Usually stopped already.
        self._stop_engine()

        logger.info("Recognition error: %s %s", error.error, error.message)
        self._notify(self._on_error, error, "error")

    def _handle_end(self, generation: int) -> None:
        if self._is_stale(generation, "end"):
            return

        if self._state is SessionState.IDLE:
            logger.debug("End notification with no attempt in flight, ignoring")
            return

        reason = self._recovery
        if reason is RecoveryReason.TRANSIENT:
            self._recovery = None
        self._set_state(SessionState.IDLE)

        if reason is RecoveryReason.TRANSIENT:
            self._deliver_result(None)

        if not self._always_on:
            return

        # A pending full restart is carried out by start_listening() itself.
        self.start_listening()

    # ------------------------------------------------------------------
    # Caller notifications
    # ------------------------------------------------------------------

    def _deliver_result(self, result: str | None) -> None:
        self._notify(self._on_result, result, "result")

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        self._state = state
        self._notify(self._on_state_change, state, "state change")

    @staticmethod
    def _notify(callback: Callable | None, value, label: str) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.warning("Session %s callback raised", label, exc_info=True)
