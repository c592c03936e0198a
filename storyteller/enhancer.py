"""
Storyteller - Heuristic Enhancer

Derives a title, summary, key quotes, themes, emotions and content
warnings from a narrative using keyword and pattern rules.

Features:
    - Title from hint, first sentence, or top theme
    - Extractive summary bounded by word count
    - Quote selection by length and emotional vocabulary
    - Theme / emotion / content-warning tagging via keyword tables
    - Deterministic fallback result on analysis failure

Usage:
    from storyteller.enhancer import HeuristicEnhancer
    from storyteller.models import StoryHint

    enhancer = HeuristicEnhancer()
    result = enhancer.enhance(narrative, StoryHint(title=None))
    print(result.themes)

Version: 0.1.0
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import EnhancementError
from .logger import get_logger
from .models import EnhancementResult, StoryHint
from .narrative import split_paragraphs
from .rules import KeywordRules, default_rules, match_categories

__all__ = [
    'DEFAULT_TITLE',
    'DEFAULT_SUMMARY',
    'EnhancerConfig',
    'HeuristicEnhancer',
    'enhance',
    'split_sentences',
    'narrative_sentences',
]

log = get_logger(__name__)

DEFAULT_TITLE = "Community Story"
DEFAULT_SUMMARY = "A meaningful story from our community."

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_SPEAKER_LABEL_RE = re.compile(r"^\s*\*\*[^*]+:\*\*\s*")

# Failures the enhancer recovers from with the fallback result.
_RECOVERABLE_ERRORS = (
    AttributeError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
    re.error,
    EnhancementError,
)


def split_sentences(text: str) -> List[str]:
    """Split on runs of terminal punctuation, dropping empty fragments."""
    parts = (s.strip() for s in _SENTENCE_SPLIT_RE.split(text))
    return [s for s in parts if s]


def narrative_sentences(narrative: str) -> List[str]:
    """
    Sentences of a narrative, one paragraph at a time.

    A leading speaker label is dropped from each paragraph and line breaks
    inside a sentence become single spaces, so no sentence spans two
    paragraphs.
    """
    sentences: List[str] = []
    for paragraph in split_paragraphs(narrative):
        body = _SPEAKER_LABEL_RE.sub("", paragraph, count=1)
        sentences.extend(" ".join(s.split()) for s in split_sentences(body))
    return sentences


@dataclass
class EnhancerConfig:
    """
    Thresholds for heuristic analysis.

    Attributes:
        title_min_length: First-sentence titles must be longer than this
        title_max_length: First-sentence titles must be shorter than this
        summary_word_limit: Maximum words in the summary
        summary_max_sentences: Optional cap on summary sentences
        quote_min_length: Minimum quote length in characters (inclusive)
        quote_max_length: Maximum quote length in characters (exclusive)
    """
    title_min_length: int = 10
    title_max_length: int = 80
    summary_word_limit: int = 150
    summary_max_sentences: Optional[int] = None
    quote_min_length: int = 50
    quote_max_length: int = 200


class HeuristicEnhancer:
    """
    Rule-based narrative analysis.

    ``enhance`` never raises: recoverable errors are routed to
    ``fallback_result`` and logged.

    Attributes:
        rules: Keyword tables and caps
        config: Analysis thresholds

    Example:
        enhancer = HeuristicEnhancer(load_rules(Path("rules.yaml")))
        result = enhancer.enhance(narrative, story.hint)
        if result.is_fallback:
            print("analysis degraded")
    """

    def __init__(
        self,
        rules: Optional[KeywordRules] = None,
        config: Optional[EnhancerConfig] = None,
    ):
        self.rules = rules or default_rules()
        self.config = config or EnhancerConfig()

    def enhance(
        self,
        narrative: str,
        hint: Optional[StoryHint] = None,
    ) -> EnhancementResult:
        """
        Analyze a narrative.

        Args:
            narrative: Output of :func:`storyteller.narrative.narrate`
            hint: Optional caller-supplied title/author

        Returns:
            EnhancementResult; the fallback result on recoverable failure
        """
        hint = hint or StoryHint()
        try:
            return self._analyze(narrative, hint)
        except _RECOVERABLE_ERRORS as e:
            log.warning(
                "enhancement_fallback",
                error_type=type(e).__name__,
                error=str(e),
            )
            return self.fallback_result(hint)

    def fallback_result(self, hint: Optional[StoryHint] = None) -> EnhancementResult:
        """Conservative generic result used when analysis fails."""
        title = getattr(hint, "title", None)
        if not isinstance(title, str) or not title:
            title = DEFAULT_TITLE
        return EnhancementResult(
            title=title,
            summary=DEFAULT_SUMMARY,
            is_fallback=True,
        )

    # =========================================================================
    # Analysis
    # =========================================================================

    def _analyze(self, narrative: str, hint: StoryHint) -> EnhancementResult:
        if not isinstance(narrative, str):
            raise EnhancementError(
                f"Narrative must be text, got {type(narrative).__name__}"
            )

        sentences = narrative_sentences(narrative)
        themes = match_categories(narrative, self.rules.themes, self.rules.theme_cap)

        return EnhancementResult(
            title=hint.title or self._generate_title(sentences, themes),
            summary=self._generate_summary(sentences),
            key_quotes=self._extract_quotes(sentences),
            themes=themes,
            emotions=match_categories(
                narrative, self.rules.emotions, self.rules.emotion_cap
            ),
            content_warnings=match_categories(
                narrative, self.rules.content_warnings, self.rules.warning_cap
            ),
        )

    def _generate_title(self, sentences: List[str], themes: List[str]) -> str:
        first = sentences[0] if sentences else ""
        if self.config.title_min_length < len(first) < self.config.title_max_length:
            return first

        if themes:
            return f"A Story of {themes[0].capitalize()}"

        return DEFAULT_TITLE

    def _generate_summary(self, sentences: List[str]) -> str:
        limit = self.config.summary_max_sentences
        candidates = sentences if limit is None else sentences[:limit]

        parts: List[str] = []
        word_count = 0
        for sentence in candidates:
            words = len(sentence.split())
            if word_count + words > self.config.summary_word_limit:
                break
            parts.append(sentence)
            word_count += words

        if not parts:
            return DEFAULT_SUMMARY
        return ". ".join(parts) + "."

    def _extract_quotes(self, sentences: List[str]) -> List[str]:
        vocabulary = [w.lower() for w in self.rules.emotional_vocabulary]
        quotes: List[str] = []
        for sentence in sentences:
            if self.rules.quote_cap is not None and len(quotes) >= self.rules.quote_cap:
                break
            if not (
                self.config.quote_min_length
                <= len(sentence)
                < self.config.quote_max_length
            ):
                continue
            lowered = sentence.lower()
            if any(term in lowered for term in vocabulary):
                quotes.append(sentence)
        return quotes


_default_enhancer = HeuristicEnhancer()


def enhance(narrative: str, hint: Optional[StoryHint] = None) -> EnhancementResult:
    """Analyze *narrative* with the built-in rules."""
    return _default_enhancer.enhance(narrative, hint)
