from __future__ import annotations

import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict

FrameCallback = Callable[[], None]


class FrameScheduler(ABC):
    """Source of per-frame callbacks for the playback engine."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> int:
        """Schedule ``callback`` for the next frame and return a handle."""
        raise NotImplementedError

    @abstractmethod
    def cancel_frame(self, handle: int) -> None:
        """Cancel a pending callback; unknown or spent handles are ignored."""
        raise NotImplementedError


class ManualFrameScheduler(FrameScheduler):
    """Queues frame callbacks until :meth:`run_frame` is called.

    Callbacks requested while a frame runs are deferred to the next frame, so
    a callback that reschedules itself never runs twice in one frame. Frames
    may be requested from any thread; they always run on the thread calling
    :meth:`run_frame`.
    """

    def __init__(self) -> None:
        self._handles = itertools.count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self._lock = threading.Lock()
        self.frames_run = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        with self._lock:
            handle = next(self._handles)
            self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        with self._lock:
            self._pending.pop(handle, None)

    def run_frame(self) -> int:
        """Run every callback queued before this frame; return how many ran."""
        with self._lock:
            batch = list(self._pending)
        ran = 0
        for handle in batch:
            # An earlier callback in this batch may have cancelled it.
            with self._lock:
                callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback()
            ran += 1
        self.frames_run += 1
        return ran


class CooperativeFrameScheduler(ManualFrameScheduler):
    """Single-threaded frame loop that sleeps one frame interval between frames."""

    def __init__(
        self,
        frame_interval: float = 1 / 60,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__()
        self.frame_interval = frame_interval
        self._sleep = sleep
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def run(self, on_frame: Callable[[], None] | None = None) -> None:
        """Run frames until nothing is pending or :meth:`stop` is called."""
        self._stopped = False
        while self.pending and not self._stopped:
            self._sleep(self.frame_interval)
            self.run_frame()
            if on_frame is not None:
                on_frame()
