"""
Tests for storyteller.models and storyteller.exceptions

Coverage:
    RawStoryInput.from_record: content/title/author extraction,
        nested storyteller name, blank values, validation errors
    record_identifier: id, index, unknown
    BeautifiedStory.to_dict field set
    BatchResult counters, summary and per-index error lookup
    exception string formatting
"""

import pytest

from storyteller.exceptions import (
    ConfigurationError,
    RecordValidationError,
    StorytellerError,
)
from storyteller.models import (
    BatchResult,
    BeautifiedStory,
    EnhancementResult,
    RawStoryInput,
    StoryHint,
    StoryMetrics,
    record_identifier,
)


# ---------------------------------------------------------------------------
# RawStoryInput
# ---------------------------------------------------------------------------

class TestFromRecord:
    def test_basic(self):
        story = RawStoryInput.from_record(
            {"id": 1, "content": "text", "title": "T", "author_name": "Ann"}
        )
        assert story == RawStoryInput(raw_content="text", title="T", author_name="Ann")
        assert story.hint == StoryHint(title="T", author_name="Ann")

    def test_nested_storyteller_name(self):
        story = RawStoryInput.from_record(
            {"content": "text", "storyteller": {"full_name": "Sam Lee"}}
        )
        assert story.author_name == "Sam Lee"

    def test_author_name_preferred(self):
        story = RawStoryInput.from_record({
            "content": "text",
            "author_name": "Ann",
            "storyteller": {"full_name": "Sam Lee"},
        })
        assert story.author_name == "Ann"

    def test_blank_title_is_none(self):
        story = RawStoryInput.from_record({"content": "text", "title": "   "})
        assert story.title is None

    def test_empty_content_allowed(self):
        assert RawStoryInput.from_record({"content": ""}).raw_content == ""

    def test_null_content(self):
        with pytest.raises(RecordValidationError) as exc_info:
            RawStoryInput.from_record({"id": "x9", "content": None})
        assert exc_info.value.record_id == "x9"
        assert exc_info.value.field == "content"

    def test_missing_content(self):
        with pytest.raises(RecordValidationError):
            RawStoryInput.from_record({"id": "x9"})

    def test_not_a_mapping(self):
        with pytest.raises(RecordValidationError):
            RawStoryInput.from_record(["content"])

    def test_non_string_title(self):
        with pytest.raises(RecordValidationError) as exc_info:
            RawStoryInput.from_record({"content": "text", "title": 42})
        assert exc_info.value.field == "title"

    def test_non_string_nested_author(self):
        with pytest.raises(RecordValidationError) as exc_info:
            RawStoryInput.from_record({"content": "text", "storyteller": {"full_name": 7}})
        assert exc_info.value.field == "storyteller.full_name"


@pytest.mark.parametrize("record, index, expected", [
    ({"id": 42}, 3, "42"),
    ({"id": None}, 3, "#3"),
    ("not a record", 0, "#0"),
    ({}, None, "unknown"),
])
def test_record_identifier(record, index, expected):
    assert record_identifier(record, index) == expected


# ---------------------------------------------------------------------------
# BeautifiedStory / BatchResult
# ---------------------------------------------------------------------------

def test_beautified_story_to_dict():
    story = BeautifiedStory(
        content="Narrative text here.",
        enhancement=EnhancementResult(
            title="T", summary="S.", key_quotes=["q"], themes=["housing"],
        ),
        metrics=StoryMetrics(estimated_reading_time=1, quality_score=0.8, word_count=3),
    )
    data = story.to_dict()
    assert set(data) == {
        "title", "summary", "content", "key_quotes", "themes", "emotions",
        "content_warnings", "estimated_reading_time", "quality_score",
    }
    assert data["themes"] == ["housing"]
    assert data["emotions"] == []
    assert story.title == "T"
    assert story.quality_score == 0.8


def test_batch_result_summary():
    result = BatchResult(successful=3, failed=1, total_time_ms=12.5)
    assert result.total == 4
    assert result.success_rate == 75.0
    summary = result.summary()
    assert "3/4 beautified (75.0%)" in summary
    assert "Passed through unchanged: 1" in summary


def test_empty_batch_success_rate():
    assert BatchResult().success_rate == 0.0


def test_batch_result_failures_with_shared_id():
    result = BatchResult()
    result.add_success({"id": "ok"})
    first = {"id": "dup", "content": None}
    second = {"id": "dup", "content": None}
    assert result.add_failure(first, 1, "E1") == "dup"
    assert result.add_failure(second, 2, "E2") == "dup#2"

    assert result.errors == {"dup": "E1", "dup#2": "E2"}
    assert result.error_at(0) is None
    assert result.error_at(1) == "E1"
    assert result.error_at(2) == "E2"
    assert result.records == [{"id": "ok"}, first, second]
    assert (result.successful, result.failed) == (1, 2)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

def test_error_str_includes_details():
    err = ConfigurationError("bad cap", config_key="caps.themes")
    assert isinstance(err, StorytellerError)
    assert str(err) == "bad cap | Details: {'config_key': 'caps.themes'}"


def test_error_str_without_details():
    assert str(RecordValidationError("no content")) == "no content"
