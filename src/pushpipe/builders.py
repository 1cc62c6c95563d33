"""
Convenience constructors. Each one is a Transform over a small
``(obj, emit)`` closure; the ``*_async`` variants take coroutine callbacks
and inherit Transform's task semantics (no ordering across inputs).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, Sequence

from .errors import ConfigurationError
from .stream import Stream, StreamInput
from .transform import Emit, Source, Transform


def transform(func: Callable[[Any, Emit], Any]) -> Transform[Any, Any]:
    return Transform(func)


def map(func: Callable[[Any], Any]) -> Transform[Any, Any]:
    def _map(obj: Any, emit: Emit) -> None:
        emit(func(obj))
    return Transform(_map)


def filter(predicate: Callable[[Any], Any]) -> Transform[Any, Any]:
    def _filter(obj: Any, emit: Emit) -> None:
        if predicate(obj):
            emit(obj)
    return Transform(_filter)


def for_each(func: Callable[[Any], Any]) -> Transform[Any, Any]:
    def _for_each(obj: Any, emit: Emit) -> None:
        func(obj)
        emit(obj)
    return Transform(_for_each)


def branch(predicate: Callable[[Any], Any], alt: StreamInput[Any]) -> Transform[Any, Any]:
    """Objects matching ``predicate`` go to ``alt`` instead of downstream."""
    def _branch(obj: Any, emit: Emit) -> None:
        if predicate(obj):
            alt.input(obj)
        else:
            emit(obj)
    return Transform(_branch)


def spread() -> Transform[Iterable[Any], Any]:
    def _spread(items: Iterable[Any], emit: Emit) -> None:
        for item in items:
            emit(item)
    return Transform(_spread)


def split(size: int) -> Transform[Sequence[Any], Sequence[Any]]:
    """Re-slice each incoming sequence into chunks of at most ``size``."""
    if not isinstance(size, int) or size <= 0:
        raise ConfigurationError(f"split size must be a positive integer, got {size!r}")

    def _split(seq: Sequence[Any], emit: Emit) -> None:
        for start in range(0, len(seq), size):
            emit(seq[start:start + size])
    return Transform(_split)


def merge(*streams: Stream[Any, Any]) -> Source[Any]:
    """Pipe every given node into one new Source and return it."""
    joined: Source[Any] = Source()
    for st in streams:
        st.pipe(joined)
    return joined


def map_async(func: Callable[[Any], Awaitable[Any]]) -> Transform[Any, Any]:
    async def _map(obj: Any, emit: Emit) -> None:
        emit(await func(obj))
    return Transform(_map)


def filter_async(predicate: Callable[[Any], Awaitable[Any]]) -> Transform[Any, Any]:
    async def _filter(obj: Any, emit: Emit) -> None:
        if await predicate(obj):
            emit(obj)
    return Transform(_filter)


def for_each_async(func: Callable[[Any], Awaitable[Any]]) -> Transform[Any, Any]:
    async def _for_each(obj: Any, emit: Emit) -> None:
        await func(obj)
        emit(obj)
    return Transform(_for_each)


def branch_async(
        predicate: Callable[[Any], Awaitable[Any]],
        alt: StreamInput[Any],
    ) -> Transform[Any, Any]:
    async def _branch(obj: Any, emit: Emit) -> None:
        if await predicate(obj):
            alt.input(obj)
        else:
            emit(obj)
    return Transform(_branch)
