import logging

import structlog
from structlog.stdlib import add_log_level, add_logger_name


def resolve_level(level: int | str) -> int:
    """Accept ``logging.DEBUG`` or ``"debug"``; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def setup_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    """Configure structlog and standard logging.

    Console output is colourised for humans; ``json_output`` switches to one
    JSON object per line for headless runs whose output is collected.
    """
    level = resolve_level(level)
    logging.basicConfig(level=level, format="%(message)s")
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_logger_name,
            add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=False),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
