"""Optional call/return tracing for the solver, built on the standard logging module."""

import functools
import logging
from typing import Any, Callable, TypeVar, cast

TRACE_LOGGER_NAME = "minegroups.trace"
TRACE_INDENT = "  "

trace_logger = logging.getLogger(TRACE_LOGGER_NAME)

F = TypeVar("F", bound=Callable[..., Any])

_depth: int = 0


def tracing_enabled() -> bool:
    """Return True if call tracing would currently be emitted."""
    return trace_logger.isEnabledFor(logging.DEBUG)


def _prefix() -> str:
    return TRACE_INDENT * _depth


def trace(message: str, *args: Any) -> None:
    """Log a free-form trace line at the current call depth."""
    if tracing_enabled():
        trace_logger.debug("%sTRACE " + message, _prefix(), *args)


def traced(method: F) -> F:
    """
    Log entry and exit of a method on the ``minegroups.trace`` logger.

    Lines look like ``CALL GroupSolver(1403...)#explore (cell,)`` and
    ``RET GroupSolver(1403...)#explore (NoneType) None`` and are indented by
    nesting depth. When the logger is not enabled for DEBUG the wrapped
    method is called directly.
    """

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        if not tracing_enabled():
            return method(self, *args, **kwargs)

        global _depth
        owner = f"{type(self).__name__}({id(self)})#{method.__name__}"
        trace_logger.debug("%sCALL %s %r", _prefix(), owner, args)
        _depth += 1
        try:
            result = method(self, *args, **kwargs)
        finally:
            _depth -= 1
        trace_logger.debug(
            "%sRET %s (%s) %r", _prefix(), owner, type(result).__name__, result
        )
        return result

    return cast(F, wrapper)
