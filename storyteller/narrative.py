"""
Storyteller - Narrative Transformer

Reflows cleaned transcript text into paragraph-structured prose.

Speaker paragraphs keep a normalized ``**Name:** `` prefix; other
paragraphs are single-spaced and start with a capital letter. Fragments
of ten characters or fewer are treated as noise and dropped.

Usage:
    from storyteller.cleaner import clean
    from storyteller.narrative import narrate

    narrative = narrate(clean(raw_transcript))
"""

import re
from typing import List, Optional

__all__ = [
    'MIN_PARAGRAPH_LENGTH',
    'narrate',
    'split_paragraphs',
]

# Paragraphs at or below this many characters are dropped.
MIN_PARAGRAPH_LENGTH = 10

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
_SPEAKER_PARAGRAPH_RE = re.compile(r"^\*\*([^*]+):\*\*\s*")
_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_LOWER_RE = re.compile(r"^([a-z])")


def split_paragraphs(text: str) -> List[str]:
    """Split on blank lines, trimming and dropping empty candidates."""
    parts = (p.strip() for p in _PARAGRAPH_BREAK_RE.split(text))
    return [p for p in parts if p]


def _reflow(paragraph: str) -> Optional[str]:
    speaker = _SPEAKER_PARAGRAPH_RE.match(paragraph)
    if speaker:
        name = _WHITESPACE_RE.sub(" ", speaker.group(1).strip())
        body = _WHITESPACE_RE.sub(" ", paragraph[speaker.end():]).strip()
        reflowed = f"**{name}:** {body}".strip()
    else:
        reflowed = _WHITESPACE_RE.sub(" ", paragraph)
        reflowed = _LEADING_LOWER_RE.sub(lambda m: m.group(1).upper(), reflowed)

    if len(reflowed) <= MIN_PARAGRAPH_LENGTH:
        return None
    return reflowed


def narrate(cleaned: str) -> str:
    """
    Transform cleaned text into narrative paragraphs.

    Never fails; empty input yields an empty narrative.

    Args:
        cleaned: Output of :func:`storyteller.cleaner.clean`

    Returns:
        Paragraphs joined by exactly one blank line
    """
    paragraphs = []
    for candidate in split_paragraphs(cleaned):
        reflowed = _reflow(candidate)
        if reflowed is not None:
            paragraphs.append(reflowed)
    return "\n\n".join(paragraphs)
