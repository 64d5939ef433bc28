# projfinder/logging_setup.py
import logging
import sys
from typing import Any, List
import structlog

APP_LOGGER_NAME = "projfinder"

# -v selects info, -vv and beyond select debug; warnings are always shown.
VERBOSITY_LEVELS = ["warning", "info", "debug"]

def level_for_verbosity(verbosity: int) -> str:
    return VERBOSITY_LEVELS[max(0, min(verbosity, len(VERBOSITY_LEVELS) - 1))]

def _select_renderer(force_json_logs: bool) -> Any:
    # json for log shippers, otherwise a console renderer that only colors a real terminal.
    if force_json_logs:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False):
    """
    Routes structlog events through the stdlib ``projfinder`` logger to stderr.

    stdout carries command results (project paths, json listings), so every
    diagnostic goes to stderr regardless of renderer.
    """
    log_level = getattr(logging, log_level_str.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=_select_renderer(force_json_logs),
        foreign_pre_chain=[structlog.stdlib.add_logger_name, structlog.stdlib.add_log_level],
    ))

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.handlers.clear()
    app_logger.addHandler(handler)
    app_logger.setLevel(log_level)
    # events stay on our handler instead of reaching whatever the root logger has.
    app_logger.propagate = False

    structlog.get_logger(__name__).debug("logging_configured", level=logging.getLevelName(log_level), json=force_json_logs)
