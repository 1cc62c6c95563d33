from __future__ import annotations

import logging
from collections import deque
from typing import Any, Generic, TypeVar

from .stream import Stream

logger = logging.getLogger(__name__)

I = TypeVar("I")
O = TypeVar("O")


class _Completion(Generic[O]):
    def __init__(self, owner: Backpressure[Any, O]) -> None:
        self._owner = owner

    def input(self, obj: O) -> None:
        self._owner._complete(obj)


class Backpressure(Stream[I, O]):
    """
    Serializes inputs to ``strm``: the next queued item is only handed over
    once ``strm`` has emitted a result for the previous one.

    ``strm`` must emit exactly once per input. If it drops an input the
    node stays in flight forever and the queue stops draining; ``in_flight``
    and ``pending`` make that visible but nothing recovers from it.
    """

    def __init__(self, strm: Stream[I, O], log: bool = False) -> None:
        super().__init__(log)
        self.strm = strm
        self._queue: deque[I] = deque()
        self._in_flight = False
        strm.pipe(_Completion(self))

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def pending(self) -> int:
        return len(self._queue)

    def input(self, obj: I) -> None:
        self._queue.append(obj)
        if self.log and self._in_flight:
            logger.debug("in flight, %d item(s) queued", len(self._queue))
        self._advance()

    def _advance(self) -> None:
        if self._in_flight or not self._queue:
            return
        self._in_flight = True
        self.strm.input(self._queue.popleft())

    def _complete(self, obj: O) -> None:
        self._output(obj)
        self._in_flight = False
        self._advance()


def backpressure(strm: Stream[I, O], log: bool = False) -> Backpressure[I, O]:
    return Backpressure(strm, log)
