from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError
from .scheduler import LoopScheduler, Scheduler, TimerHandle
from .stream import Stream

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatchOptions(BaseModel):
    """Flush policy for a Batch node.

    Timeouts are in seconds. ``idle_timeout`` and ``delay_timeout`` are
    mutually exclusive; ``max_items`` combines with either. With nothing
    set, the node behaves as ``idle_timeout=0``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_items: int | None = Field(
        default=None,
        ge=1,
        description="Flush as soon as this many items are buffered",
    )
    idle_timeout: float | None = Field(
        default=None,
        ge=0,
        description="Flush this long after the most recent input",
    )
    delay_timeout: float | None = Field(
        default=None,
        ge=0,
        description="Flush this long after the first input into an empty buffer",
    )

    @model_validator(mode="after")
    def _single_timeout(self) -> BatchOptions:
        if self.idle_timeout is not None and self.delay_timeout is not None:
            raise ValueError("idle_timeout and delay_timeout cannot both be set")
        return self

    def resolved(self) -> BatchOptions:
        if self.max_items is None and self.idle_timeout is None and self.delay_timeout is None:
            return self.model_copy(update={"idle_timeout": 0.0})
        return self


class BatchState(Enum):
    Empty = auto()
    Accumulating = auto()


class Batch(Stream[T, list[T]]):
    """
    Collects inputs and emits them as one list.

    Every input cancels the idle timer. A full buffer (``max_items``) is
    flushed on the spot; otherwise the idle timer is re-armed, or the delay
    timer is armed if it is not already running. The delay deadline is
    fixed by the first input after a flush.
    """

    def __init__(
            self,
            options: BatchOptions | None = None,
            *,
            max_items: int | None = None,
            idle_timeout: float | None = None,
            delay_timeout: float | None = None,
            scheduler: Scheduler | None = None,
            log: bool = False,
        ) -> None:
        super().__init__(log)
        if options is None:
            try:
                options = BatchOptions(
                    max_items=max_items,
                    idle_timeout=idle_timeout,
                    delay_timeout=delay_timeout,
                )
            except ValidationError as e:
                raise ConfigurationError(f"invalid batch options: {e}") from e
        elif max_items is not None or idle_timeout is not None or delay_timeout is not None:
            raise ConfigurationError("pass either a BatchOptions instance or keyword options, not both")

        self.options = options.resolved()
        self.scheduler: Scheduler = scheduler if scheduler is not None else LoopScheduler()
        self._buffer: list[T] = []
        self._idle_timer: TimerHandle | None = None
        self._delay_timer: TimerHandle | None = None

    @property
    def state(self) -> BatchState:
        return BatchState.Accumulating if self._buffer else BatchState.Empty

    @property
    def buffer(self) -> list[T]:
        """Live buffer. Mutating it affects the next flush."""
        return self._buffer

    def input(self, obj: T) -> None:
        if self._idle_timer is not None:
            self._idle_timer.cancel()
            self._idle_timer = None

        self._buffer.append(obj)
        opts = self.options

        if opts.max_items is not None and len(self._buffer) >= opts.max_items:
            self._flush("max_items")
            return

        try:
            if opts.idle_timeout is not None:
                self._idle_timer = self.scheduler.call_later(opts.idle_timeout, self._on_idle)
            elif opts.delay_timeout is not None and self._delay_timer is None:
                self._delay_timer = self.scheduler.call_later(opts.delay_timeout, self._on_delay)
        except Exception:
            # no timer means nothing would ever flush this item
            self._buffer.pop()
            raise

    def flush(self) -> None:
        """Emit whatever is buffered. No-op on an empty buffer."""
        self._flush("manual")

    def _on_idle(self) -> None:
        self._idle_timer = None
        self._flush("idle_timeout")

    def _on_delay(self) -> None:
        self._delay_timer = None
        self._flush("delay_timeout")

    def _flush(self, trigger: str) -> None:
        if self._delay_timer is not None:
            self._delay_timer.cancel()
            self._delay_timer = None

        if not self._buffer:
            return

        # swap first so inputs arriving during emit start a new batch
        items, self._buffer = self._buffer, []
        if self.log:
            logger.info("flushing %d item(s) on %s", len(items), trigger)
        self._output(items)


def batch(options: BatchOptions | None = None, **kwargs: Any) -> Batch[Any]:
    return Batch(options, **kwargs)
