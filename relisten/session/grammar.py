"""Vocabulary grammar and transcript normalisation helpers."""

from collections.abc import Iterable

_GRAMMAR_HEADER = "#JSGF V1.0; grammar word; public <word> = "


def unique_vocabulary(words: Iterable[str]) -> tuple[str, ...]:
    """Return *words* without duplicates, keeping first-seen order."""
    return tuple(dict.fromkeys(words))


def build_grammar(vocabulary: Iterable[str]) -> str:
    """Build the JSGF rule that makes the engine prefer *vocabulary*.

    >>> build_grammar(["yes", "no"])
    '#JSGF V1.0; grammar word; public <word> = yes | no;'
    """
    return _GRAMMAR_HEADER + " | ".join(vocabulary) + ";"


def normalize_transcript(transcript: str) -> str:
    """Lower-case a transcript and strip all of its leading whitespace."""
    return transcript.lower().lstrip()
