from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

I = TypeVar("I")
O = TypeVar("O")
I_contra = TypeVar("I_contra", contravariant=True)


class StreamInput(Protocol[I_contra]):
    def input(self, obj: I_contra) -> None:
        ...


S = TypeVar("S", bound=StreamInput[Any])


class Stream(ABC, Generic[I, O]):
    '''
    push node: accepts one object at a time and fans its output out to
    every piped recipient, in the order they were piped
    '''

    def __init__(self, log: bool = False) -> None:
        self.log = log
        self._outputs: list[StreamInput[O]] = []

    @abstractmethod
    def input(self, obj: I) -> None:
        ...

    def _output(self, obj: O) -> None:
        # recipients run synchronously and depth-first; an exception from
        # one of them stops delivery to the rest
        for recipient in self._outputs:
            recipient.input(obj)

    def pipe(self, recipient: S) -> S:
        """
        Append ``recipient`` to the downstream list and return it, so that
        ``a.pipe(b).pipe(c)`` builds a -> b -> c.
        """
        self._outputs.append(recipient)
        if self.log:
            logger.debug("%r piped into %r", self, recipient)
        return recipient

    def __rshift__(self, recipient: S) -> S:
        return self.pipe(recipient)

    @property
    def outputs(self) -> tuple[StreamInput[O], ...]:
        return tuple(self._outputs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(outputs={len(self._outputs)})"
