"""Exception translation at third-party call boundaries.

Third-party code raises exceptions outside any hierarchy we control. bashlex
raises ``bashlex.errors.ParsingError`` for syntax errors, but also bare
``NotImplementedError`` for arithmetic expansion and ``case`` statements, and
the occasional ``IndexError`` on truncated input. ``subprocess`` raises
``CalledProcessError`` for a non-zero git exit and ``FileNotFoundError`` when
git is not installed. LibraryBoundary translates any of these into one known
type, preserving the original via exception chaining, so callers catch a
single domain exception:

    with LibraryBoundary(BashParseError):
        nodes = bashlex.parse(command)

    @LibraryBoundary(GitQueryError)
    def run_git(args: Sequence[str], cwd: str) -> str:
        ...

This is distinct from ErrorBoundary (``error_boundary.py``), which catches and
handles exceptions at the process edge. LibraryBoundary translates at call
sites. The translated exception still propagates to be handled by business
logic (the analyzer turns ``BashParseError`` into ``Unparsable``; rules turn
``GitQueryError`` into a pass).

See also:
    - PEP 3134: Exception chaining (``raise X from Y``).
"""

from __future__ import annotations

__all__ = ['LibraryBoundary']

import functools
from collections.abc import Callable
from types import TracebackType
from typing import Any, Self, TypeVar, cast

_F = TypeVar('_F', bound=Callable[..., object])

# Control-flow exceptions that are Exception subclasses but must never be
# translated. Translating them breaks the iterator/generator protocols.
_PASSTHROUGH = (StopIteration, StopAsyncIteration, GeneratorExit)


class LibraryBoundary:
    """Translate exceptions from third-party calls into a known type.

    Catches any ``Exception`` that isn't already the target type and re-raises
    as the target with exception chaining. System exceptions
    (``KeyboardInterrupt``, ``SystemExit``) and control-flow exceptions
    (``StopIteration``, ``GeneratorExit``) always pass through.

    Args:
        target: Exception type to translate into. Must accept a string message.
    """

    def __init__(self, target: type[Exception]) -> None:
        self._target = target

    # -- Decorator protocol --

    def __call__(self, func: _F) -> _F:
        """Decorate a function with this library boundary."""

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
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_val is None or isinstance(exc_val, self._target):
            return  # No exception, or already translated (double-wrap guard)
        if not isinstance(exc_val, Exception) or isinstance(exc_val, _PASSTHROUGH):
            return  # System or control-flow exception: pass through
        message = str(exc_val) or type(exc_val).__name__
        raise self._target(message).with_traceback(exc_tb) from exc_val
