"""Process-level error boundary for hook entry points.

Distinguishes boundary-level error handling (unexpected failures at the hook's
process edge) from business-logic error handling (expected failures inside
rules). Python's try/except conflates these; ErrorBoundary makes the intent
explicit.

Layers of error handling in this package:

    Layer 1, Business Logic:
        Local try/except for expected failures. A rule that shells out to git
        catches ``GitQueryError`` and passes.

    Layer 2, Library Boundary:
        Third-party exceptions translated into domain types at the call site
        (``library_boundary.py``): bashlex → ``BashParseError``.

    Layer 3, Process Boundary:
        ErrorBoundary() around a hook's ``main()``. Maps the exception type to
        a message on stderr and a hook exit code.

The hook protocol gives exit codes meaning: 0 lets the tool call proceed,
2 blocks it, anything else is reported as a non-blocking hook error. Handlers
may carry their own exit code, so a malformed payload and a crashed
rule leave the process with different codes.

System exceptions (KeyboardInterrupt, SystemExit, GeneratorExit) always pass
through because they are not application errors. ``sys.exit(2)`` inside ``main()``
is the normal deny path and must never be intercepted.

Pattern::

    boundary = ErrorBoundary(exit_code=1)

    @boundary.handler(pydantic.ValidationError)
    def _handle_validation(exc: pydantic.ValidationError) -> None:
        print(f'schema violation: {exc.error_count()} error(s)', file=sys.stderr)

    @boundary.handler(RuleEngineError, exit_code=2)
    def _handle_rule_failure(exc: RuleEngineError) -> None:
        print(f'⛔ Rule engine failure in {exc.rule_name}', file=sys.stderr)

    @boundary
    def main() -> None:
        ...

See also:
    - ``functools.singledispatch``: Powers the type-based handler dispatch
      internally. Handlers are matched by MRO.
    - ``contextlib.suppress()``: For expected exceptions to ignore silently.
      ErrorBoundary is for unexpected exceptions that need reporting.
"""

from __future__ import annotations

__all__ = [
    'ErrorBoundary',
    'ErrorHandler',
]

import functools
import sys
import traceback
from collections.abc import Callable
from functools import singledispatch
from types import TracebackType
from typing import Any, Self, TypeVar, cast

type ErrorHandler = Callable[[Exception], None]

_F = TypeVar('_F', bound=Callable[..., object])


class ErrorBoundary:
    """Error boundary with type-based handler dispatch and per-type exit codes.

    Catches application exceptions (Exception subclasses) and delegates to
    registered handlers. System exceptions pass through unconditionally.

    Supports two usage forms:

    - **Decorator**: ``@boundary`` on the hook's ``main()``
    - **Context manager**: ``with boundary:``

    Args:
        handler: Convenience for registering a catch-all handler (equivalent
            to ``@boundary.handler(Exception)``). Defaults to printing
            the traceback to stderr.
        exit_code: Process exit code after handling when the matched handler
            did not register its own. ``None`` suppresses and continues.

    Composition:
        Boundaries nest predictably. An inner boundary that exits raises
        SystemExit, which the outer boundary lets through.
    """

    def __init__(
        self,
        *,
        handler: ErrorHandler | None = None,
        exit_code: int | None = 1,
    ) -> None:
        self._dispatch = singledispatch(_default_handler)
        self._exit_codes = singledispatch(_no_exit_code_override)
        if handler is not None:
            self._dispatch.register(Exception, handler)
        self._exit_code = exit_code

    def handler(
        self,
        exc_type: type[Exception],
        *,
        exit_code: int | None = None,
    ) -> Callable[[Callable[..., None]], Callable[..., None]]:
        """Register a handler for a specific exception type.

        ``exit_code`` overrides the boundary's default for this exception type
        (and its subclasses, unless they register their own).

        Example::

            @boundary.handler(RuleEngineError, exit_code=2)
            def handle_rule_failure(exc: RuleEngineError) -> None:
                ...
        """
        if exit_code is not None:
            code = exit_code
            self._exit_codes.register(exc_type, lambda _exc: code)

        return self._dispatch.register(exc_type)

    def exit_code_for(self, exc: Exception) -> int | None:
        """Exit code the boundary will use for ``exc``."""
        override = cast(int | None, self._exit_codes(exc))
        return self._exit_code if override is None else override

    # -- Decorator protocol --

    def __call__(self, func: _F) -> _F:
        """Decorate a function with this error boundary.

        The undecorated function stays reachable as ``func.__wrapped__`` so
        tests can exercise ``main()`` without the boundary.
        """

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with self:
                return func(*args, **kwargs)

        return cast(_F, wrapper)

    # -- Context manager --

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        return self._handle(exc_value)

    # -- Core logic --

    def _handle(self, exc_value: BaseException | None) -> bool:
        """Core boundary logic.

        Returns True to suppress (scope boundary) or calls sys.exit() for
        process boundaries. Returns False for non-application exceptions.

        Handler failures cannot breach the boundary. If the registered handler
        raises, we fall back to stderr reporting of the original exception.
        """
        if not isinstance(exc_value, Exception):
            return False  # No exception, or system exception: pass through

        try:
            self._dispatch(exc_value)
        except Exception:
            try:  # noqa: SIM105
                _default_handler(exc_value)
            except Exception:
                pass  # stderr itself is broken; the exit code still reports the failure

        exit_code = self.exit_code_for(exc_value)
        if exit_code is not None:
            sys.exit(exit_code)

        return True


def _no_exit_code_override(exc: Exception) -> int | None:
    return None


def _default_handler(exc: Exception) -> None:
    """Print exception with traceback to stderr."""
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
