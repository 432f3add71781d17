"""
Logging for Redirect Builder.

structlog runs on top of the standard library so every record reaches one
stderr handler; stdout stays free for prompts and tables. A build binds
``run_id``, ``package_name`` and the current ``stage`` as context variables.
Toolchain output is logged line by line as ``child_output`` events carrying
``stream`` and ``line``; the console renderer collapses those to
``[stream] line`` while JSON output keeps the fields.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import Config

CHILD_OUTPUT_EVENT = "child_output"


def render_child_output(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Collapse a streamed toolchain line into its event text."""
    if event_dict.get("event") == CHILD_OUTPUT_EVENT:
        stream = event_dict.pop("stream", "?")
        line = event_dict.pop("line", "")
        event_dict["event"] = f"[{stream}] {line}"
    return event_dict


def _drop_handler_fields(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    # RichHandler prints its own time and level columns
    event_dict.pop("timestamp", None)
    event_dict.pop("level", None)
    return event_dict


def _handler(log_level: str, json_output: bool) -> logging.Handler:
    if json_output:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        renderers: list[structlog.types.Processor] = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=log_level == "DEBUG",
        )
        renderers = [
            _drop_handler_fields,
            render_child_output,
            structlog.dev.ConsoleRenderer(colors=False, pad_event=0),
        ]

    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    ))
    return handler


def setup_logging(config: Config | None = None, json_output: bool | None = None) -> None:
    """Configure structured logging for the application.

    Args:
        config: Optional configuration. If None, uses INFO level.
        json_output: Force JSON lines; defaults to JSON when stderr is not a TTY.
    """
    log_level = config.log_level if config else "INFO"
    if json_output is None:
        json_output = not sys.stderr.isatty()

    root = logging.getLogger()
    root.handlers = [_handler(log_level, json_output)]
    root.setLevel(getattr(logging, log_level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def build_context(run_id: str, package_name: str) -> Iterator[None]:
    """Bind a build's identifiers for the duration of a block.

    ``stage`` starts as ``idle``. All three keys are removed again on exit.
    """
    with structlog.contextvars.bound_contextvars(run_id=run_id, package_name=package_name, stage="idle"):
        yield


def bind_stage(stage: str) -> None:
    """Tag subsequent log entries of the current build with its stage."""
    structlog.contextvars.bind_contextvars(stage=stage)
