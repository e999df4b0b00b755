"""
Progress events for pipeline runs.

ProgressEmitter is a synchronous observer list.  Observers receive
ProgressEvent objects carrying counts and timings only, never ranked
results.  An observer that raises is logged and skipped; it cannot
affect the run or the other observers.

Event order for one run:
    pipeline:start
    stage:start / stage:complete   (per stage, in execution order)
    pipeline:complete | pipeline:error
"""

from __future__ import annotations

import time
from typing import Any, Callable

from pydantic import BaseModel, Field

from reposcout.utils.logging import get_logger

logger = get_logger("reposcout.pipeline.events")

PIPELINE_START = "pipeline:start"
PIPELINE_COMPLETE = "pipeline:complete"
PIPELINE_ERROR = "pipeline:error"
STAGE_START = "stage:start"
STAGE_COMPLETE = "stage:complete"


class ProgressEvent(BaseModel):
    type: str
    stage: str | None = None
    timestamp: float = Field(default_factory=time.time)
    data: dict[str, Any] = Field(default_factory=dict)
    message: str | None = None


ProgressObserver = Callable[[ProgressEvent], Any]


class ProgressEmitter:
    def __init__(self) -> None:
        self._observers: list[ProgressObserver] = []

    def on(self, observer: ProgressObserver) -> None:
        self._observers.append(observer)

    def off(self, observer: ProgressObserver) -> None:
        self._observers = [o for o in self._observers if o is not observer]

    def emit(
        self,
        type: str,
        *,
        stage: str | None = None,
        data: dict[str, Any] | None = None,
        message: str | None = None,
    ) -> ProgressEvent:
        event = ProgressEvent(type=type, stage=stage, data=data or {}, message=message)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception as e:
                logger.warning("Progress observer %r failed on %s: %s", observer, type, e)
        return event
