"""
Storyteller Test Configuration — Shared Fixtures

Provides sample transcripts, content-store records and configuration
objects built from known test values without touching environment
variables or the filesystem.

All fixtures use pytest's function scope so each test starts clean.
"""

import pytest
import structlog

from storyteller.config import StorytellerConfig, get_config
from storyteller.pipeline import StoryBeautifier


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep STORYTELLER_* variables and ./.env out of every test."""
    monkeypatch.setenv("STORYTELLER_ENV_FILE", str(tmp_path / "missing.env"))
    for name in (
        "STORYTELLER_LOG_LEVEL",
        "STORYTELLER_LOG_DIR",
        "STORYTELLER_MAX_CONCURRENCY",
        "STORYTELLER_RECORD_TIMEOUT_S",
        "STORYTELLER_WORDS_PER_MINUTE",
        "STORYTELLER_BEAUTIFICATION_VERSION",
        "STORYTELLER_RULES_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Reset structlog to default configuration after each test."""
    yield
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Text fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def speaker_transcript() -> str:
    """One timestamped speaker line."""
    return (
        "[00:01:02] **Sam:** I felt so grateful for my community's help "
        "with housing."
    )


@pytest.fixture()
def messy_transcript() -> str:
    """Multi-speaker transcript carrying every kind of artifact."""
    return (
        "[00:00:01] [SPEAKER_1] **Ann:** we moved here in 1998 .. "
        "it was hard !!\n"
        "\n"
        "   \n"
        "\n"
        "[00:00:09.250] \\#home meant ~~everything~~ to us [INAUDIBLE] "
        "and we never gave up?!  **Joe:** I remember the school   "
        "and the teachers who helped us . . .\n"
        "ok\n"
    )


@pytest.fixture()
def long_story() -> str:
    """Two paragraphs, 240 words, sentences of 12 words."""
    sentence = (
        "We walked down to the river every morning and talked about family"
    )
    first = ". ".join([sentence] * 10) + "."
    second = ". ".join([sentence] * 10) + "."
    return f"{first}\n\n{second}"


# ---------------------------------------------------------------------------
# Record fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def records(speaker_transcript: str) -> list:
    """Three content-store records; the middle one has null content."""
    return [
        {"id": "a1", "content": speaker_transcript, "status": "draft"},
        {"id": "b2", "content": None, "status": "draft"},
        {
            "id": "c3",
            "title": "The Overdose Years",
            "content": "I lost my brother to an overdose and it broke my heart.",
            "storyteller": {"full_name": "Kim Ray"},
        },
    ]


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def storyteller_cfg() -> StorytellerConfig:
    """StorytellerConfig with deterministic test values."""
    return StorytellerConfig(
        log_level="DEBUG",
        max_concurrency=2,
        words_per_minute=200,
    )


@pytest.fixture()
def beautifier() -> StoryBeautifier:
    return StoryBeautifier()
