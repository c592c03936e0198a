"""
Storyteller - Formatting Cleaner

Strips transcription artifacts from raw transcript text and normalizes
punctuation and whitespace.

Rules run in the order of ``CLEANING_RULES``; later rules assume the
normalization done by earlier ones:

    1. unescape_markdown              \\# \\** \\_  →  # ** _
    2. strip_timestamps               [00:01:02] and [00:01:02.345]
    3. strip_speaker_tags             [SPEAKER_1] [UNKNOWN_SPEAKER] [CROSSTALK],
                                      [INAUDIBLE] → [inaudible]
    4. strip_strikethrough            ~~text~~ → text
    5. collapse_blank_lines           at most one blank line
    6. strip_trailing_whitespace
    7. split_speaker_labels           **Name:** starts a new paragraph
    8. collapse_repeated_punctuation  "?!" → "!", "..." → "."
    9. fix_punctuation_spacing

Usage:
    from storyteller.cleaner import clean

    cleaned = clean("[00:00:04] **Ann:** we moved here in 1998..")
"""

import re
from dataclasses import dataclass
from typing import Callable, Tuple

__all__ = [
    'CleaningRule',
    'CLEANING_RULES',
    'clean',
]


_ESCAPED_MARKDOWN_RE = re.compile(r"\\(\\|#|\*\*|_)")
_TIMESTAMP_RE = re.compile(r"\[\d{2}:\d{2}:\d{2}(?:\.\d{3})?\]")
_SPEAKER_TAG_RE = re.compile(r"\[(?:SPEAKER_\d+|UNKNOWN_SPEAKER|CROSSTALK)\]")
_INAUDIBLE_RE = re.compile(r"\[INAUDIBLE\]")
_STRIKETHROUGH_RE = re.compile(r"~~([^~\n]+)~~")
# Lines holding only spaces/tabs count as blank.
_BLANK_RUN_RE = re.compile(r"\n(?:[ \t]*\n){2,}")
_TRAILING_WS_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_SPEAKER_LABEL_RE = re.compile(r"[ \t]*\n?[ \t]*(?P<label>\*\*[^*\n]+:\*\*)")
_REPEATED_PUNCT_RE = re.compile(r"([.!?]){2,}")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.!?])")
_SPACE_AFTER_PUNCT_RE = re.compile(r"([.!?])[ \t]*([A-Z])")


def unescape_markdown(text: str) -> str:
    # An escaped backslash is kept whole so it cannot escape what follows.
    return _ESCAPED_MARKDOWN_RE.sub(
        lambda m: m.group(0) if m.group(1) == "\\" else m.group(1), text
    )


def strip_timestamps(text: str) -> str:
    return _TIMESTAMP_RE.sub("", text)


def strip_speaker_tags(text: str) -> str:
    """Drop speaker placeholders; keep inaudible gaps visible."""
    text = _SPEAKER_TAG_RE.sub("", text)
    return _INAUDIBLE_RE.sub("[inaudible]", text)


def strip_strikethrough(text: str) -> str:
    return _STRIKETHROUGH_RE.sub(r"\1", text)


def collapse_blank_lines(text: str) -> str:
    return _BLANK_RUN_RE.sub("\n\n", text)


def strip_trailing_whitespace(text: str) -> str:
    return _TRAILING_WS_RE.sub("", text)


def split_speaker_labels(text: str) -> str:
    """
    Start a new paragraph at every ``**Name:**`` label.

    Labels already at the start of the text or of a paragraph are left
    alone, so the rule is stable when applied twice.
    """
    def _split(match: re.Match) -> str:
        preceding = text[:match.start("label")].rstrip(" \t")
        if not preceding or preceding.endswith("\n\n"):
            return match.group(0)
        return "\n\n" + match.group("label")

    return _SPEAKER_LABEL_RE.sub(_split, text)


def collapse_repeated_punctuation(text: str) -> str:
    return _REPEATED_PUNCT_RE.sub(r"\1", text)


def fix_punctuation_spacing(text: str) -> str:
    text = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
    # "wait . . ." only becomes a run once the spaces are gone
    text = collapse_repeated_punctuation(text)
    return _SPACE_AFTER_PUNCT_RE.sub(r"\1 \2", text)


@dataclass(frozen=True)
class CleaningRule:
    """
    A named text transformation.

    Attributes:
        name: Stable identifier used in tests and debug logs
        apply: Pure ``str -> str`` function
    """
    name: str
    apply: Callable[[str], str]


CLEANING_RULES: Tuple[CleaningRule, ...] = (
    CleaningRule("unescape_markdown", unescape_markdown),
    CleaningRule("strip_timestamps", strip_timestamps),
    CleaningRule("strip_speaker_tags", strip_speaker_tags),
    CleaningRule("strip_strikethrough", strip_strikethrough),
    CleaningRule("collapse_blank_lines", collapse_blank_lines),
    CleaningRule("strip_trailing_whitespace", strip_trailing_whitespace),
    CleaningRule("split_speaker_labels", split_speaker_labels),
    CleaningRule("collapse_repeated_punctuation", collapse_repeated_punctuation),
    CleaningRule("fix_punctuation_spacing", fix_punctuation_spacing),
)


def clean(raw: str, rules: Tuple[CleaningRule, ...] = CLEANING_RULES) -> str:
    """
    Remove transcript artifacts from *raw*.

    Never fails on string input; the empty string cleans to itself.

    Args:
        raw: Machine-transcribed text
        rules: Ordered rules to apply (defaults to ``CLEANING_RULES``)

    Returns:
        Cleaned text
    """
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    for rule in rules:
        text = rule.apply(text)
    return text
