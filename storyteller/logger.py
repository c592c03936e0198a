#!/usr/bin/env python3
"""
Storyteller — Structured Logging

Configures structlog with dual output:
    File    — rotating JSON at {log_dir}/storyteller.log (10 MB, 5 backups),
              only when ``log_dir`` is configured
    Console — human-readable at WARNING+ level

Story text is personal.  The ``redact_sensitive`` processor runs for every
record and replaces text-bearing fields with their length:

    DO log    — record ids, counts, scores, timings, error types
    NEVER log — transcript content, narratives, summaries, quotes, names

Public API:
    configure_logging  — initialise structlog + stdlib logging handlers
    get_logger         — return a bound structlog logger for a module
    redact_sensitive   — structlog processor stripping story text

Usage:
    from storyteller.config import get_config
    from storyteller.logger import configure_logging, get_logger

    configure_logging(get_config())
    log = get_logger(__name__)
    log.info("story_beautified", record_id="42", quality_score=0.9)

Version: 0.1.0
"""

import io
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog

from storyteller.config import StorytellerConfig

SENSITIVE_KEYS: frozenset[str] = frozenset({
    "content",
    "raw_content",
    "text",
    "narrative",
    "summary",
    "key_quotes",
    "author_name",
})


def redact_sensitive(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace story text in *event_dict* with a length marker.

    Strings become ``"[REDACTED len=N]"``, lists ``"[REDACTED items=N]"``,
    anything else ``"[REDACTED]"``.
    """
    for key in SENSITIVE_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str):
            event_dict[key] = f"[REDACTED len={len(value)}]"
        elif isinstance(value, (list, tuple)):
            event_dict[key] = f"[REDACTED items={len(value)}]"
        else:
            event_dict[key] = "[REDACTED]"
    return event_dict


# Run for structlog-native and foreign (stdlib) records alike.
_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    redact_sensitive,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.ExceptionRenderer(),
]


def configure_logging(
    cfg: StorytellerConfig,
    *,
    console_level: str = "WARNING",
) -> None:
    """Initialise structlog and stdlib logging.

    Safe to call multiple times — duplicate handlers are not added if the
    root logger already has a ``RotatingFileHandler`` or bare
    ``StreamHandler`` from a previous call.

    Args:
        cfg: Configuration providing ``log_dir`` and ``log_level``.
        console_level: Minimum level for the stderr console handler.
    """
    file_level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    con_level = getattr(logging, console_level.upper(), logging.WARNING)

    structlog.configure(
        processors=_SHARED_PROCESSORS + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            min(file_level, con_level)
        ),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=_SHARED_PROCESSORS,
    )

    console_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        foreign_pre_chain=_SHARED_PROCESSORS,
    )

    root = logging.getLogger()

    has_rotating = any(
        isinstance(h, logging.handlers.RotatingFileHandler)
        for h in root.handlers
    )
    has_stream = any(
        type(h) is logging.StreamHandler
        for h in root.handlers
    )

    if cfg.log_dir is not None and not has_rotating:
        log_dir = Path(cfg.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "storyteller.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter)
        file_handler.setLevel(file_level)
        root.addHandler(file_handler)

    if not has_stream:
        # UTF-8 stream so non-ASCII story metadata never raises on LANG=C.
        raw = getattr(sys.stderr, "buffer", None)
        if raw is not None:
            stream: io.TextIOBase = io.TextIOWrapper(
                raw, encoding="utf-8", errors="backslashreplace", line_buffering=True
            )
        else:
            stream = sys.stderr
        console_handler = logging.StreamHandler(stream)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(con_level)
        root.addHandler(console_handler)

    root.setLevel(logging.DEBUG)


def get_logger(name: str = "storyteller") -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
    """
    return structlog.get_logger(name)
