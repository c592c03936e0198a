"""
Storyteller - Metrics Calculator

Reading time and a bounded quality score from structural features of a
narrative.

Scoring:
    base                                     0.70
    mean sentence length in (10, 25) words   +0.10
    word count in (200, 2000)                +0.10
    at least one paragraph break             +0.10
    result clamped to [0.0, 1.0]

Usage:
    from storyteller.metrics import compute_metrics

    m = compute_metrics(narrative)
    print(m.estimated_reading_time, m.quality_score)
"""

import math
import re

from .models import StoryMetrics

__all__ = [
    'BASE_QUALITY_SCORE',
    'WORDS_PER_MINUTE',
    'compute_metrics',
    'mean_sentence_length',
]

WORDS_PER_MINUTE = 200
BASE_QUALITY_SCORE = 0.70
BONUS = 0.10

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def mean_sentence_length(text: str) -> float:
    """Average words per sentence; 0.0 when there are no sentences."""
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if not sentences:
        return 0.0
    return sum(len(s.split()) for s in sentences) / len(sentences)


def compute_metrics(
    narrative: str,
    words_per_minute: int = WORDS_PER_MINUTE,
) -> StoryMetrics:
    """
    Compute reading time and quality score.

    Never fails on string input; empty narratives read in one minute and
    score the base value.

    Args:
        narrative: Output of :func:`storyteller.narrative.narrate`
        words_per_minute: Reading speed

    Returns:
        StoryMetrics
    """
    word_count = len(narrative.split())
    reading_time = max(1, math.ceil(word_count / words_per_minute))

    score = BASE_QUALITY_SCORE
    if 10 < mean_sentence_length(narrative) < 25:
        score += BONUS
    if 200 < word_count < 2000:
        score += BONUS
    if "\n\n" in narrative:
        score += BONUS

    score = min(1.0, max(0.0, score))

    return StoryMetrics(
        estimated_reading_time=reading_time,
        quality_score=round(score, 2),
        word_count=word_count,
    )
