# ChatGPT MCP Tool - Response cleaner and completeness heuristic
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Strip UI chrome from scraped replies and guess whether they are finished."""

import re
from dataclasses import dataclass
from typing import Optional

import settings

# Button labels and the streaming cursor that end up in scraped text.
_CHROME_PATTERNS = [
    re.compile(r"Regenerate( response)?"),
    re.compile(r"Continue generating"),
    re.compile("\u258d"),  # streaming cursor
]

_ZERO_WIDTH = re.compile(r"[\u200b-\u200d\u2060\ufeff]")
_LINE_SEPARATORS = re.compile(r"[\u2028\u2029]")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")

_TERMINAL_CHARS = (".", "!", "?", ":", ")", "}", "]")
_SENTENCE_SHAPE = re.compile(r"[A-Z].*[.!?]")


def _clean_once(text: str) -> str:
    for pattern in _CHROME_PATTERNS:
        text = pattern.sub("", text)
    text = _ZERO_WIDTH.sub("", text)
    text = _LINE_SEPARATORS.sub("\n", text)
    text = text.replace("\u202f", " ")  # narrow no-break space
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def clean(raw: str) -> str:
    """Remove chrome tokens and zero-width characters, then trim.

    Unicode line and paragraph separators become newlines and narrow
    no-break spaces become plain spaces; other text is left alone.

    Runs to a fixed point: removing one token can splice two halves of
    another together ("RegenRegenerateerate").
    """
    text = raw or ""
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


@dataclass
class Completeness:
    complete: bool
    signal: Optional[str] = None  # which check fired

    def __bool__(self) -> bool:
        return self.complete


def check_completeness(cleaned: str, min_length: int = settings.COMPLETE_LENGTH) -> Completeness:
    """Heuristic: does this reply look finished?

    A warning signal only; false positives and negatives are expected.
    """
    if len(cleaned) > min_length:
        return Completeness(True, "length")
    if _SENTENCE_SHAPE.fullmatch(cleaned):
        return Completeness(True, "sentence_shape")
    if cleaned.endswith(_TERMINAL_CHARS):
        return Completeness(True, "terminal_punctuation")
    if "\n\n" in cleaned:
        return Completeness(True, "paragraph_break")
    return Completeness(False)


def is_likely_complete(cleaned: str, min_length: int = settings.COMPLETE_LENGTH) -> bool:
    return check_completeness(cleaned, min_length).complete
