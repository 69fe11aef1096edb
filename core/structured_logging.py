"""Structured logging helpers with build correlation context.

Every record gets ``build_id``, ``phase`` and ``module`` fields, so log
lines from concurrent transforms can be attributed to the module being
optimized.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

_BUILD_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "build_id", default="-"
)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "phase", default="-"
)
_MODULE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "module", default="-"
)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | build_id=%(build_id)s | phase=%(phase)s | "
    "module=%(module_id)s | %(name)s | %(message)s"
)


class BuildContextFilter(logging.Filter):
    """Inject build correlation fields into all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.build_id = _BUILD_ID_VAR.get("-")
        record.phase = _PHASE_VAR.get("-")
        # ``module`` is taken by LogRecord itself
        record.module_id = _MODULE_VAR.get("-")
        return True


def _install_filter(handlers: list[logging.Handler]) -> None:
    for handler in handlers:
        if not any(isinstance(f, BuildContextFilter) for f in handler.filters):
            handler.addFilter(BuildContextFilter())


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Configure root logging with the build/phase/module format."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
    _install_filter(root_logger.handlers)


def set_build_id(build_id: str | None = None) -> str:
    """Set or generate the build correlation ID (12 hex chars when generated)."""
    value = build_id or uuid.uuid4().hex[:12]
    _BUILD_ID_VAR.set(value)
    return value


def get_build_id() -> str:
    return _BUILD_ID_VAR.get("-")


def get_phase() -> str:
    return _PHASE_VAR.get("-")


def get_module() -> str:
    return _MODULE_VAR.get("-")


@contextmanager
def _scoped(var: contextvars.ContextVar[str], value: str) -> Iterator[None]:
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


def phase_scope(phase: str):
    """Temporarily set the pipeline phase (``config``, ``rewrite``...)."""
    return _scoped(_PHASE_VAR, phase)


def module_scope(module_id: str):
    """Temporarily attribute emitted logs to one consumer module."""
    return _scoped(_MODULE_VAR, module_id)
