"""Command-line interface for relisten.

Provides ``relisten listen`` and ``relisten grammar``. The entry point is
registered via ``pyproject.toml`` as ``relisten = "relisten.cli:cli"``.
"""

import asyncio
import logging
import sys

import click

from relisten.config import LOCALE, STT_API_KEY, STT_FAILURE_DELAY
from relisten.session.grammar import build_grammar, unique_vocabulary
from relisten.session.speech_session import SpeechSession
from relisten.session.types import RecognitionError, SessionState
from relisten.stt.microphone import MicrophoneCapture
from relisten.stt.stt_client import STTClient
from relisten.stt.whisper_engine import whisper_engine_factory

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_NO_RESULT = "<no result>"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    """Configure the root logger for terminal output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
    )


def _echo_result(result: str | None) -> None:
    click.echo(result if result is not None else _NO_RESULT)


def _echo_error(error: RecognitionError) -> None:
    message = f"Recognition error: {error.error}"
    if error.message:
        message += f" ({error.message})"
    click.echo(click.style(message, fg="yellow"), err=True)


async def _listen(words: tuple[str, ...], always_on: bool, locale: str) -> None:
    """Run a session over the microphone until interrupted or, in single-shot mode, idle."""
    microphone = MicrophoneCapture()
    stt_client = STTClient()
    await microphone.start()
    await stt_client.start()

    loop = asyncio.get_running_loop()
    finished = asyncio.Event()

    def _on_state_change(state: SessionState) -> None:
        logger.debug("Session state: %s", state.value)
        if not always_on and state is SessionState.IDLE:
            finished.set()

    def _on_error(error: RecognitionError) -> None:
        _echo_error(error)
        # An always-on session left idle could not rebuild or start its engine.
        if always_on and session.state is SessionState.IDLE:
            logger.info("Retrying in %.1fs", STT_FAILURE_DELAY)
            loop.call_later(STT_FAILURE_DELAY, session.start_listening)

    session = SpeechSession(
        words,
        always_on,
        _echo_result,
        _on_error,
        engine_factory=whisper_engine_factory(microphone, stt_client),
        locale=locale,
        on_state_change=_on_state_change,
    )

    try:
        session.start_listening()
        await finished.wait()
    finally:
        await stt_client.stop()
        await microphone.stop()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """relisten -- always-on listening over single-shot speech recognition."""


# ---------------------------------------------------------------------------
# grammar
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("words", nargs=-1, required=True)
def grammar(words: tuple[str, ...]) -> None:
    """Print the JSGF vocabulary grammar for WORDS."""
    click.echo(build_grammar(unique_vocabulary(words)))


# ---------------------------------------------------------------------------
# listen
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("words", nargs=-1, required=True)
@click.option(
    "--single-shot", is_flag=True, help="Stop after one attempt instead of listening on"
)
@click.option("--locale", default=None, help=f"Recognition locale (default: {LOCALE})")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def listen(
    words: tuple[str, ...], single_shot: bool, locale: str | None, verbose: bool
) -> None:
    """Listen on the microphone for WORDS and print each result."""
    _setup_logging(verbose)

    if not STT_API_KEY:
        click.echo(
            click.style(
                "RELISTEN_STT_API_KEY is not set. A Whisper API key is required.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    mode = "single-shot" if single_shot else "always-on"
    click.echo(f"Listening ({mode}) for: {', '.join(unique_vocabulary(words))}")

    try:
        asyncio.run(_listen(words, not single_shot, locale or LOCALE))
    except KeyboardInterrupt:
        click.echo(click.style("Stopped.", fg="green"))
