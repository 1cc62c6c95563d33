from __future__ import annotations

import asyncio
import inspect
import logging
from asyncio import Task
from typing import Any, AsyncIterable, Awaitable, Callable, Iterable, TypeAlias, TypeVar

from .stream import Stream

logger = logging.getLogger(__name__)

I = TypeVar("I")
O = TypeVar("O")
T = TypeVar("T")

Emit: TypeAlias = Callable[[Any], None]
TransformFunc: TypeAlias = Callable[[Any, Emit], Awaitable[None] | None]


class Transform(Stream[I, O]):
    """
    Runs ``func(obj, emit)`` for every input. ``func`` decides how often to
    call ``emit``: never (drop), once (map) or many times (spread).

    A coroutine function is started as a task on the running loop and
    ``input`` returns straight away. Overlapping tasks are not serialized,
    so outputs follow task completion order, not input order.
    """

    def __init__(self, func: TransformFunc, log: bool = False) -> None:
        super().__init__(log)
        self.func = func
        self._tasks: set[Task[Any]] = set()

    def input(self, obj: I) -> None:
        result = self.func(obj, self._output)
        if inspect.isawaitable(result):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                if inspect.iscoroutine(result):
                    result.close()
                raise
            self._register_task(asyncio.ensure_future(result, loop=loop))

    def _register_task(self, task: Task[Any]) -> None:
        self._tasks.add(task)

        def _cleanup(_: Task[Any]) -> None:
            self._tasks.discard(task)
            # reading the exception marks it retrieved, so only do it when
            # the caller asked for logs in place of asyncio's own report
            if self.log and not task.cancelled() and task.exception() is not None:
                logger.warning("async transform failed: %r", task.exception())

        task.add_done_callback(_cleanup)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def join(self) -> None:
        """Wait for every pending task; re-raises the first failure."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))


class Source(Stream[T, T]):
    """
    Addressable head of a pipeline. Whatever is passed to ``input`` is
    emitted unchanged.
    """

    def input(self, obj: T) -> None:
        self._output(obj)

    def feed(self, items: Iterable[T]) -> None:
        for item in items:
            self.input(item)

    async def afeed(self, items: AsyncIterable[T]) -> None:
        async for item in items:
            self.input(item)


def source(log: bool = False) -> Source[Any]:
    return Source(log)
