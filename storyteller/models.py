"""
Storyteller - Data Models

Core data structures for the beautification pipeline.
Defines the data flow from a raw content-store record to the
beautified story handed back for persistence.

Data Flow:
    record (content store dict)
    → RawStoryInput (validated, immutable)
    → cleaned text → narrative text
    → EnhancementResult + StoryMetrics
    → BeautifiedStory
    → BatchResult (batch outcome)

Usage:
    from storyteller.models import RawStoryInput

    story = RawStoryInput.from_record({"id": 7, "content": "[00:00:01] Hi..."})
    print(story.hint.title)

Version: 0.1.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import RecordValidationError

__all__ = [
    'StoryHint',
    'RawStoryInput',
    'EnhancementResult',
    'StoryMetrics',
    'BeautifiedStory',
    'BatchResult',
    'record_identifier',
]


def record_identifier(record: Any, index: Optional[int] = None) -> str:
    """
    Identify a record for logs and error reports.

    Uses the record's ``id`` when present, else its position in the batch.
    Never touches story text.
    """
    if isinstance(record, Mapping) and record.get("id") is not None:
        return str(record["id"])
    if index is not None:
        return f"#{index}"
    return "unknown"


def _optional_text(record: Mapping[str, Any], value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise RecordValidationError(
            f"Field '{field_name}' must be a string, got {type(value).__name__}",
            record_id=record.get("id"),
            field=field_name,
        )
    return value.strip() or None


@dataclass(frozen=True)
class StoryHint:
    """
    Caller-supplied hints for the enhancer.

    Attributes:
        title: Title given by the storyteller or an editor
        author_name: Display name of the storyteller
    """
    title: Optional[str] = None
    author_name: Optional[str] = None


@dataclass(frozen=True)
class RawStoryInput:
    """
    A raw transcript queued for beautification.

    Immutable; read once per pipeline invocation.

    Attributes:
        raw_content: Machine-transcribed text, artifacts included
        title: Optional caller-supplied title
        author_name: Optional storyteller display name

    Example:
        >>> story = RawStoryInput.from_record({
        ...     "id": "abc",
        ...     "content": "**Sam:** I grew up here.",
        ...     "storyteller": {"full_name": "Sam Lee"},
        ... })
        >>> story.author_name
        'Sam Lee'
    """
    raw_content: str
    title: Optional[str] = None
    author_name: Optional[str] = None

    @property
    def hint(self) -> StoryHint:
        """Title/author hint passed to the enhancer."""
        return StoryHint(title=self.title, author_name=self.author_name)

    @classmethod
    def from_record(cls, record: Any) -> "RawStoryInput":
        """
        Build a story input from a content-store record.

        Reads ``content``, ``title`` and the author from ``author_name``
        or the nested ``storyteller.full_name``.

        Args:
            record: Mapping as returned by the content store

        Returns:
            Validated RawStoryInput

        Raises:
            RecordValidationError: If the record is not a mapping, has no
                string ``content``, or carries non-string title/author
        """
        if not isinstance(record, Mapping):
            raise RecordValidationError(
                f"Record must be a mapping, got {type(record).__name__}"
            )

        content = record.get("content")
        if not isinstance(content, str):
            raise RecordValidationError(
                "Record has no text content",
                record_id=record.get("id"),
                field="content",
            )

        author = record.get("author_name")
        author_field = "author_name"
        if author is None:
            storyteller = record.get("storyteller")
            if isinstance(storyteller, Mapping):
                author = storyteller.get("full_name")
                author_field = "storyteller.full_name"

        return cls(
            raw_content=content,
            title=_optional_text(record, record.get("title"), "title"),
            author_name=_optional_text(record, author, author_field),
        )


@dataclass(frozen=True)
class EnhancementResult:
    """
    Metadata derived from a narrative by the heuristic enhancer.

    Attributes:
        title: Story title
        summary: Extractive summary
        key_quotes: Up to five representative sentences
        themes: Theme tags in rule declaration order
        emotions: Emotional tone tags in rule declaration order
        content_warnings: Every matching sensitivity category
        is_fallback: True when produced by the fallback branch
    """
    title: str
    summary: str
    key_quotes: List[str] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    emotions: List[str] = field(default_factory=list)
    content_warnings: List[str] = field(default_factory=list)
    is_fallback: bool = False


@dataclass(frozen=True)
class StoryMetrics:
    """
    Structural metrics of a narrative.

    Attributes:
        estimated_reading_time: Whole minutes, never below 1
        quality_score: Readability heuristic in [0.0, 1.0]
        word_count: Whitespace-separated tokens in the narrative
    """
    estimated_reading_time: int
    quality_score: float
    word_count: int = 0


@dataclass(frozen=True)
class BeautifiedStory:
    """
    Final pipeline output for one story.

    Attributes:
        content: Narrative text
        enhancement: Derived title/summary/tags
        metrics: Reading time and quality score
    """
    content: str
    enhancement: EnhancementResult
    metrics: StoryMetrics

    @property
    def title(self) -> str:
        return self.enhancement.title

    @property
    def quality_score(self) -> float:
        return self.metrics.quality_score

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the field set persisted by the content store.

        Returns:
            Dictionary of title, summary, content, quotes, tags,
            reading time and quality score
        """
        e = self.enhancement
        return {
            "title": e.title,
            "summary": e.summary,
            "content": self.content,
            "key_quotes": list(e.key_quotes),
            "themes": list(e.themes),
            "emotions": list(e.emotions),
            "content_warnings": list(e.content_warnings),
            "estimated_reading_time": self.metrics.estimated_reading_time,
            "quality_score": self.metrics.quality_score,
        }


@dataclass
class BatchResult:
    """
    Outcome of a batch run.

    ``records`` keeps input order: beautified records on success, the
    original record object on failure.

    Attributes:
        records: Output records, one per input
        successful: Number of beautified records
        failed: Number of records passed through unchanged
        errors: Error text by record identifier
        total_time_ms: Wall-clock time of the batch
    """
    records: List[Any] = field(default_factory=list)
    successful: int = 0
    failed: int = 0
    errors: Dict[str, str] = field(default_factory=dict)
    total_time_ms: float = 0.0
    failed_keys: Dict[int, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.successful + self.failed

    def add_success(self, output: Any) -> None:
        """Append a beautified record."""
        self.records.append(output)
        self.successful += 1

    def add_failure(self, record: Any, index: int, error: str) -> str:
        """
        Append a passed-through record and file its error.

        Records sharing an ``id`` get distinct keys (``"<id>#<index>"``
        after the first).

        Returns:
            The key under which the error was stored
        """
        key = record_identifier(record, index)
        if key in self.errors:
            key = f"{key}#{index}"
        self.errors[key] = error
        self.failed_keys[index] = key
        self.records.append(record)
        self.failed += 1
        return key

    def error_at(self, index: int) -> Optional[str]:
        """Error text for the record at *index*, or None if it succeeded."""
        key = self.failed_keys.get(index)
        return None if key is None else self.errors[key]

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.total == 0:
            return 0.0
        return (self.successful / self.total) * 100

    def summary(self) -> str:
        """Generate human-readable summary."""
        return (
            f"Beautification Complete\n"
            f"{'=' * 40}\n"
            f"Stories: {self.successful}/{self.total} beautified "
            f"({self.success_rate:.1f}%)\n"
            f"Passed through unchanged: {self.failed}\n"
            f"Time: {self.total_time_ms:.1f}ms"
        )
