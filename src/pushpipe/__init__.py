"""
Pushpipe - push-based object streaming for Python.

Nodes accept one object at a time and push results to every node piped
after them. Includes a batching node with count, idle and delay flush
policies, and a backpressure wrapper that keeps one item in flight.
"""

from .stream import Stream, StreamInput
from .transform import Transform, Source, source
from .batch import Batch, BatchOptions, BatchState, batch
from .backpressure import Backpressure, backpressure
from .builders import (
    transform,
    map,
    filter,
    for_each,
    branch,
    spread,
    split,
    merge,
    map_async,
    filter_async,
    for_each_async,
    branch_async,
)
from .scheduler import Scheduler, LoopScheduler, ManualScheduler
from .errors import PushpipeError, ConfigurationError

__version__ = "0.1.0"

__all__ = [
    "Stream",
    "StreamInput",
    "Transform",
    "Source",
    "source",
    "Batch",
    "BatchOptions",
    "BatchState",
    "batch",
    "Backpressure",
    "backpressure",
    "transform",
    "map",
    "filter",
    "for_each",
    "branch",
    "spread",
    "split",
    "merge",
    "map_async",
    "filter_async",
    "for_each_async",
    "branch_async",
    "Scheduler",
    "LoopScheduler",
    "ManualScheduler",
    "PushpipeError",
    "ConfigurationError",
]
