# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Background layout worker with superseding runs.

"""
Layout engine: runs run_layout on a background thread.

Re-entrancy: each request_layout() issues a new run token and stops the
run in flight. The new run's thread first joins its predecessor (which
wakes from its frame pause immediately), so at most one run writes
positions at a time and the caller never blocks.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import logging
import threading

from ..config import LayoutConfig
from .force_directed import run_layout

logger = logging.getLogger(__name__)

StatusListener = Callable[[bool], None]


@dataclass
class LayoutRun:
    """Bookkeeping for one requested layout run."""
    token: int
    stop: threading.Event = field(default_factory=threading.Event)
    thread: Optional[threading.Thread] = None
    previous: Optional['LayoutRun'] = None
    frames: int = 0
    completed: bool = False
    error: Optional[BaseException] = None


class LayoutEngine:
    """
    Drives the force simulation for a GraphStore.

    Usage:
        engine = LayoutEngine(store)
        engine.subscribe_status(lambda running: print('busy' if running else 'idle'))
        engine.request_layout()
        engine.wait()
    """

    def __init__(self, store, config: Optional[LayoutConfig] = None):
        self.store = store
        self.config = config or store.config
        self._lock = threading.Lock()
        self._token = 0
        self._active = 0
        self._current: Optional[LayoutRun] = None
        self._listeners: List[StatusListener] = []
        self.history: deque = deque(maxlen=64)  # most recent runs

    def subscribe_status(self, listener: StatusListener):
        """Call listener(is_running) whenever the engine goes busy/idle."""
        with self._lock:
            self._listeners.append(listener)

    def _set_active(self, delta: int):
        # Caller holds self._lock
        was_running = self._active > 0
        self._active += delta
        is_running = self._active > 0
        if was_running != is_running:
            for listener in list(self._listeners):
                try:
                    listener(is_running)
                except Exception:
                    logger.exception("Layout status listener failed")

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._active > 0

    def request_layout(self) -> int:
        """
        Start a layout run against the current graph, superseding any
        run in progress. Returns the new run token.
        """
        with self._lock:
            self._token += 1
            previous = self._current
            if previous is not None:
                previous.stop.set()
                logger.debug(f"Layout run {previous.token} superseded by {self._token}")

            run = LayoutRun(token=self._token, previous=previous)
            run.thread = threading.Thread(
                target=self._run,
                args=(run,),
                name=f"layout-run-{run.token}",
                daemon=True,
            )
            self._current = run
            self.history.append(run)
            self._set_active(+1)
            # started under the lock so wait() never joins an unstarted thread
            run.thread.start()

        return run.token

    def _run(self, run: LayoutRun):
        try:
            if run.previous is not None:
                run.previous.thread.join()
                run.previous = None

            if run.stop.is_set():
                return

            logger.info(f"Layout run {run.token} started ({len(self.store)} nodes)")
            for _ in run_layout(self.store, self.config, run.stop):
                run.frames += 1
            run.completed = not run.stop.is_set()
            logger.info(
                f"Layout run {run.token} "
                f"{'finished' if run.completed else 'stopped'} after {run.frames} frames"
            )
        except Exception as e:
            run.error = e
            logger.exception(f"Layout run {run.token} failed")
        finally:
            with self._lock:
                if self._current is run:
                    self._current = None
                self._set_active(-1)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no run is in progress.

        Returns:
            True if the engine is idle, False on timeout.
        """
        while True:
            with self._lock:
                run = self._current
            if run is None:
                return not self.is_running
            run.thread.join(timeout)
            if run.thread.is_alive():
                return False

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Stop the run in progress, if any, and wait for it to exit."""
        with self._lock:
            run = self._current
            if run is not None:
                run.stop.set()
        return self.wait(timeout)
