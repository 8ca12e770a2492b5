"""Enumerations used across the pipeline."""

from enum import Enum


class LayerMode(str, Enum):
    SYNC = "sync"  # fn(*args) -> True stops the walk
    ASYNC = "async"  # fn(*args, next) must call next(error, done) once
    COROUTINE = "coroutine"  # async def fn(*args), awaited on the running loop


class LayerEvent(str, Enum):
    USE = "use"
    REMOVE = "remove"


class WalkOutcome(str, Enum):
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"
