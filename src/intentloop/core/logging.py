"""
[IL-A005] intentloop.core.logging
structlog 설정

version: 1.0.0
created: 2026-10-03
modified: 2026-10-03
dependencies: structlog>=25.5.0
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:  # [IL-A005.1]
    """structlog 전역 설정.

    Args:
        level: 로그 레벨 (DEBUG|INFO|WARNING|ERROR)
        fmt: console 또는 json
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def preview(text: str, limit: int = 100) -> str:  # [IL-A005.2]
    """로그용 메시지 미리보기."""
    return text[:limit] + ("..." if len(text) > limit else "")
