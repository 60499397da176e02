"""Logging setup driven by ObservabilityConfig.

Components log through ``logging.getLogger(__name__)`` and pass their
context in ``extra``. The plain format drops that context; the
structured format renders each record, ``extra`` included, as one JSON
object through structlog.
"""

from __future__ import annotations

import logging
from typing import Optional

import structlog

from .config import ObservabilityConfig, get_config
from .domain.errors import ConfigurationError


def resolve_level(name: str) -> int:
    """Translate a level name such as ``"debug"`` to its number.

    Raises:
        ConfigurationError: If the name is not a logging level.
    """
    level = logging.getLevelName(str(name).strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown logging level: {name!r}",
            setting_name="level",
            expected_type="one of DEBUG, INFO, WARNING, ERROR, CRITICAL",
        )
    return level


def json_formatter() -> logging.Formatter:
    """Formatter writing one JSON object per stdlib record."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
    )


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Install a single stream handler on the root logger.

    Raises:
        ConfigurationError: If the configured level is unknown.
    """
    config = config or get_config().observability
    level = resolve_level(config.level)

    handler = logging.StreamHandler()
    if config.structured:
        handler.setFormatter(json_formatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))

    logging.basicConfig(level=level, handlers=[handler], force=True)
