"""
Storyteller - Beautification Pipeline

Orchestrates the transcript-to-narrative workflow:
    clean → narrate → enhance → metrics

and runs it over batches of content-store records.

Features:
    - Pure, stateless per-story pipeline (safe to run concurrently)
    - Bounded concurrency with input-order results
    - Optional per-record timeout
    - Per-record failure isolation: a failed record is passed through
      untouched and logged, never aborting the batch

Usage:
    from storyteller.pipeline import BatchCoordinator, StoryBeautifier

    coordinator = BatchCoordinator(StoryBeautifier(), max_concurrency=4)
    records = await coordinator.beautify_all(records)

    # Without an event loop
    from storyteller.pipeline import beautify_all
    records = beautify_all(records)

Version: 0.1.0
"""

import asyncio
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .cleaner import clean
from .enhancer import HeuristicEnhancer
from .logger import get_logger
from .metrics import WORDS_PER_MINUTE, compute_metrics
from .models import (
    BatchResult,
    BeautifiedStory,
    RawStoryInput,
    record_identifier,
)
from .narrative import narrate

__all__ = [
    'BEAUTIFICATION_VERSION',
    'UNTITLED_STORY',
    'StoryBeautifier',
    'BatchCoordinator',
    'beautify_all',
]

log = get_logger(__name__)

BEAUTIFICATION_VERSION = "1.0"
UNTITLED_STORY = "Untitled Story"


class StoryBeautifier:
    """
    Runs the four pipeline stages for one story.

    Holds only immutable configuration, so one instance can serve
    concurrent calls.

    Attributes:
        enhancer: Heuristic enhancer (built-in rules by default)
        words_per_minute: Reading speed for reading-time estimates

    Example:
        beautifier = StoryBeautifier()
        story = beautifier.beautify(RawStoryInput(raw_content=text))
        print(story.title, story.quality_score)
    """

    def __init__(
        self,
        enhancer: Optional[HeuristicEnhancer] = None,
        words_per_minute: int = WORDS_PER_MINUTE,
    ):
        self.enhancer = enhancer or HeuristicEnhancer()
        self.words_per_minute = words_per_minute

    def beautify(self, story: RawStoryInput) -> BeautifiedStory:
        """
        Transform one raw story.

        Args:
            story: Validated input

        Returns:
            BeautifiedStory
        """
        narrative = narrate(clean(story.raw_content))
        enhancement = self.enhancer.enhance(narrative, story.hint)
        if not enhancement.title:
            enhancement = replace(enhancement, title=story.title or UNTITLED_STORY)
        metrics = compute_metrics(narrative, self.words_per_minute)
        return BeautifiedStory(
            content=narrative,
            enhancement=enhancement,
            metrics=metrics,
        )

    def beautify_record(self, record: Any, version: str = BEAUTIFICATION_VERSION) -> Dict[str, Any]:
        """
        Beautify a content-store record.

        Returns a new dict: the record's fields, overlaid with the
        beautified fields, the original text as ``raw_content``, a UTC
        ``beautified_at`` timestamp and the ``beautification_version``.

        Raises:
            RecordValidationError: If the record is malformed
        """
        story = RawStoryInput.from_record(record)
        beautified = self.beautify(story)
        return {
            **record,
            **beautified.to_dict(),
            "raw_content": story.raw_content,
            "beautified_at": datetime.now(timezone.utc).isoformat(),
            "beautification_version": version,
        }


class BatchCoordinator:
    """
    Beautifies collections of records concurrently.

    Each record runs in a worker thread, bounded by a semaphore and
    optionally by a per-record timeout. A timed-out record is reported
    as failed but keeps its slot until its thread returns, so no more
    than ``max_concurrency`` threads ever run. Output order matches
    input order.

    Attributes:
        beautifier: Per-story pipeline
        max_concurrency: Records processed at once
        record_timeout_s: Per-record limit in seconds (None for no limit)
        version: Version tag stamped on beautified records

    Example:
        coordinator = BatchCoordinator(StoryBeautifier(), record_timeout_s=5)
        result = await coordinator.run(records)
        print(result.summary())
    """

    def __init__(
        self,
        beautifier: Optional[StoryBeautifier] = None,
        max_concurrency: int = 8,
        record_timeout_s: Optional[float] = None,
        version: str = BEAUTIFICATION_VERSION,
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.beautifier = beautifier or StoryBeautifier()
        self.max_concurrency = max_concurrency
        self.record_timeout_s = record_timeout_s
        self.version = version

    async def run(self, records: Sequence[Any]) -> BatchResult:
        """
        Beautify *records*, isolating per-record failures.

        Args:
            records: Content-store records

        Returns:
            BatchResult whose ``records`` keep input order
        """
        start = time.perf_counter()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        tasks = [
            self._guarded(record, index, semaphore)
            for index, record in enumerate(records)
        ]
        outcomes: List[Tuple[Any, Optional[str]]] = await asyncio.gather(*tasks)

        result = BatchResult()
        for index, (output, error) in enumerate(outcomes):
            if error is None:
                result.add_success(output)
            else:
                result.add_failure(output, index, error)
        result.total_time_ms = (time.perf_counter() - start) * 1000

        log.info(
            "batch_complete",
            total=result.total,
            successful=result.successful,
            failed=result.failed,
            total_time_ms=round(result.total_time_ms, 2),
        )
        return result

    async def beautify_all(self, records: Sequence[Any]) -> List[Any]:
        """Beautify *records*; failed records come back unchanged."""
        result = await self.run(records)
        return result.records

    async def _guarded(
        self,
        record: Any,
        index: int,
        semaphore: asyncio.Semaphore,
    ) -> Tuple[Any, Optional[str]]:
        """
        Beautify one record; on any failure return it unchanged.

        Returns:
            (output record, error text or None)
        """
        record_id = record_identifier(record, index)
        async with semaphore:
            work = asyncio.ensure_future(asyncio.to_thread(
                self.beautifier.beautify_record, record, self.version
            ))
            try:
                if self.record_timeout_s is not None:
                    output = await asyncio.wait_for(
                        asyncio.shield(work), timeout=self.record_timeout_s
                    )
                else:
                    output = await work
            except asyncio.TimeoutError:
                # Worker threads cannot be interrupted; the slot stays taken
                # until this one returns, and its result is discarded.
                await asyncio.wait([work])
                late_error = work.exception()
                log.warning(
                    "story_beautify_timeout",
                    record_id=record_id,
                    timeout_s=self.record_timeout_s,
                    late_error_type=type(late_error).__name__ if late_error else None,
                )
                return self._pass_through(
                    record, record_id, "TimeoutError",
                    f"Timed out after {self.record_timeout_s}s",
                )
            except Exception as e:
                return self._pass_through(record, record_id, type(e).__name__, str(e))

        log.debug(
            "story_beautified",
            record_id=record_id,
            quality_score=output["quality_score"],
            reading_time=output["estimated_reading_time"],
        )
        return output, None

    @staticmethod
    def _pass_through(
        record: Any,
        record_id: str,
        error_type: str,
        error: str,
    ) -> Tuple[Any, str]:
        log.error(
            "story_beautify_failed",
            record_id=record_id,
            error_type=error_type,
            error=error,
        )
        return record, f"{error_type}: {error}"


def beautify_all(
    records: Sequence[Any],
    *,
    beautifier: Optional[StoryBeautifier] = None,
    max_concurrency: int = 8,
    record_timeout_s: Optional[float] = None,
    version: str = BEAUTIFICATION_VERSION,
) -> List[Any]:
    """
    Synchronous entry point for callers without an event loop.

    Must not be called from inside a running event loop; use
    ``BatchCoordinator.beautify_all`` there.
    """
    coordinator = BatchCoordinator(
        beautifier,
        max_concurrency=max_concurrency,
        record_timeout_s=record_timeout_s,
        version=version,
    )
    return asyncio.run(coordinator.beautify_all(records))
