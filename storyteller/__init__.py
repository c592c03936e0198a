"""
Storyteller — Transcript-to-Narrative Beautification

Turns machine-transcribed community stories into readable narratives with
a title, summary, key quotes, theme/emotion tags, content warnings and
reading metrics.  Analysis is heuristic: keyword tables and sentence
patterns, no model calls.

Pipeline:
    clean → narrate → enhance → metrics   (per story, pure)
    BatchCoordinator                      (bounded, order-preserving batches)

Quick start:
    from storyteller import RawStoryInput, StoryBeautifier, beautify_all

    story = StoryBeautifier().beautify(RawStoryInput(raw_content=text))
    print(story.title, story.metrics.estimated_reading_time)

    records = beautify_all(records)   # failed records come back unchanged
"""

from .cleaner import CLEANING_RULES, CleaningRule, clean
from .config import StorytellerConfig, build_beautifier, build_coordinator, get_config
from .enhancer import EnhancerConfig, HeuristicEnhancer, enhance
from .exceptions import (
    ConfigurationError,
    EnhancementError,
    RecordValidationError,
    StorytellerError,
)
from .logger import configure_logging, get_logger
from .metrics import compute_metrics
from .models import (
    BatchResult,
    BeautifiedStory,
    EnhancementResult,
    RawStoryInput,
    StoryHint,
    StoryMetrics,
)
from .narrative import narrate
from .pipeline import BatchCoordinator, StoryBeautifier, beautify_all
from .rules import KeywordRules, default_rules, load_rules

__version__ = "0.1.0"

__all__ = [
    # Pipeline stages
    "clean",
    "narrate",
    "enhance",
    "compute_metrics",
    "CleaningRule",
    "CLEANING_RULES",
    "EnhancerConfig",
    "HeuristicEnhancer",
    # Orchestration
    "StoryBeautifier",
    "BatchCoordinator",
    "beautify_all",
    # Rules
    "KeywordRules",
    "default_rules",
    "load_rules",
    # Models
    "RawStoryInput",
    "StoryHint",
    "EnhancementResult",
    "StoryMetrics",
    "BeautifiedStory",
    "BatchResult",
    # Config
    "StorytellerConfig",
    "get_config",
    "build_beautifier",
    "build_coordinator",
    # Logging
    "configure_logging",
    "get_logger",
    # Errors
    "StorytellerError",
    "ConfigurationError",
    "RecordValidationError",
    "EnhancementError",
]
