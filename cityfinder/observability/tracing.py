"""Tracing helpers for provider lookups and CLI invocations."""
from __future__ import annotations

import contextlib
import time
from typing import Iterator, Optional

from structlog.contextvars import bind_contextvars, clear_contextvars

from cityfinder.observability.log import get_logger


def _logger():
    return get_logger("cityfinder.trace")


def set_context(*, command: str, invocation_id: str) -> None:
    bind_contextvars(command=command, invocation_id=invocation_id)
    _logger().debug("trace_context", command=command, invocation_id=invocation_id)


def clear_context() -> None:
    clear_contextvars()


@contextlib.contextmanager
def span(*, name: str, subject: Optional[str] = None) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        _logger().debug("trace_span", span=name, subject=subject, elapsed_ms=elapsed_ms)


def log_lookup_result(*, kind: str, subject: str, status: int, candidates: int, elapsed_ms: int) -> None:
    _logger().info(
        "lookup_result",
        kind=kind,
        subject=subject,
        status=status,
        candidates=candidates,
        elapsed_ms=elapsed_ms,
    )
