"""Abstract base class for single-shot recognition engines.

The SpeechSession drives engines only through this interface, so it does
not know which backend is active. An engine is never reused across a full
restart: the session asks its factory for a new one instead.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from relisten.session.types import EngineConfig, RecognitionError, RecognitionResult

ResultHandler = Callable[[Sequence[RecognitionResult]], None]
SpeechEndHandler = Callable[[], None]
ErrorHandler = Callable[[RecognitionError], None]
EndHandler = Callable[[], None]


class RecognitionEngine(ABC):
    """A recogniser that runs one recognition attempt per ``start()``.

    Every attempt finishes with exactly one ``on_end`` notification. Before
    that it may send ``on_result``, ``on_speech_end`` and ``on_error`` in
    any order. Recognition failures are reported as ``on_error`` followed
    by ``on_end``, never raised. A ``start()`` that raises is treated by
    the session as a broken engine and replaced on the next attempt.
    Notifications must not be sent from inside ``start()`` itself. ``stop()``
    may send ``on_end`` before it returns.
    """

    @abstractmethod
    def configure(self, config: EngineConfig) -> None:
        """Apply vocabulary, locale and attempt settings for the next start."""

    @abstractmethod
    def bind(
        self,
        on_result: ResultHandler,
        on_speech_end: SpeechEndHandler,
        on_error: ErrorHandler,
        on_end: EndHandler,
    ) -> None:
        """Register the notification handlers, replacing any bound before."""

    @abstractmethod
    def start(self) -> None:
        """Begin one recognition attempt. Returns immediately."""

    @abstractmethod
    def stop(self) -> None:
        """Stop listening and finish the attempt. Safe when already stopped."""


EngineFactory = Callable[[], RecognitionEngine]
