"""Sentence-aware text truncation for summary variants."""

from __future__ import annotations

import re
from collections.abc import Iterable

ELLIPSIS = "…"

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def sentence_aware_truncate(text: str, target_words: int = 40) -> str:
    """Shorten *text* to roughly *target_words*, preferring whole sentences.

    Whole sentences are accumulated until the running word count
    reaches the target; the sentence that crosses the target is
    kept entire.  Only text without any sentence boundary (a single
    run of words with no terminal ``.``, ``!`` or ``?``) is cut
    mid-sentence, at exactly *target_words* words plus an ellipsis.

    The function is idempotent: truncating its own output with the
    same target returns that output unchanged.
    """
    clean = text.strip()
    if not clean:
        return clean

    sentences = [s.strip() for s in _SENTENCE_BOUNDARY.split(clean) if s.strip()]
    if len(sentences) <= 1 and clean[-1] not in ".!?":
        words = clean.split()
        if len(words) <= target_words:
            return clean
        return " ".join(words[:target_words]) + ELLIPSIS

    kept: list[str] = []
    count = 0
    for sentence in sentences:
        kept.append(sentence)
        count += len(sentence.split())
        if count >= target_words:
            break
    return " ".join(kept)


def limit_items(items: Iterable[object], target_words: int, max_items: int) -> list[str]:
    """Truncate each item to *target_words* and keep the first *max_items*."""
    limited: list[str] = []
    for item in items:
        if len(limited) >= max_items:
            break
        limited.append(sentence_aware_truncate(str(item), target_words))
    return limited
