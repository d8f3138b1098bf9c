"""
Structured logging for the quote service and bot.

Everything goes through stdlib ``logging`` (adapters, aggregator, and
python-telegram-bot all log there) and is rendered by structlog: JSON by
default, colored console output when running at DEBUG.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from .config import settings

# Libraries that log every Bot API poll or provider request at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "telegram", "telegram.ext")


def setup_logging(log_level: Optional[str] = None, *, json_logs: Optional[bool] = None) -> None:
    """Install the structlog formatter on the root logger.

    Args:
        log_level: Override for ``settings.log_level``.
        json_logs: Force JSON (True) or console (False) rendering. Defaults to
            console at DEBUG and JSON otherwise.
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = level != logging.DEBUG

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        pre_chain.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def bound_route(amount: str, token: str, from_chain: str, to_chain: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with the quoted route."""
    with structlog.contextvars.bound_contextvars(
        route=f"{from_chain}->{to_chain}",
        token=token,
        amount=amount,
    ):
        yield
