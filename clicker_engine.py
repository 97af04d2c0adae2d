"""
Click Loop - the timer-driven repeating click.

SRP: This module has one responsibility - firing clicks at a fixed cadence.
It doesn't know about UI, hotkeys, or sessions (Dependency Inversion Principle).
"""

import time
import threading
from typing import Optional, Callable

from errors import AlreadyRunning, ClickInjectionFailed
from models import ClickPosition


class ClickHandle:
    """
    One running schedule of clicks.

    The tick body runs under a re-entrant lock, so stopping waits for an
    in-flight tick and a handler may stop its own handle.
    """

    def __init__(self, position: ClickPosition, interval_ms: int):
        self._position = position
        self._interval = interval_ms / 1000.0
        self._stopped = threading.Event()
        self._tick_lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None
        self.interval_ms = interval_ms
        self.ticks = 0
        self.failures = 0

    @property
    def position(self) -> ClickPosition:
        with self._tick_lock:
            return self._position

    def is_active(self) -> bool:
        return not self._stopped.is_set()

    def _cancel(self) -> None:
        self._stopped.set()
        # Wait out a tick running on another thread; re-entrant for the tick's own thread.
        with self._tick_lock:
            pass
        thread = self._thread
        if thread is not None and thread is not threading.current_thread() and thread.is_alive():
            thread.join(timeout=2.0)


class ClickLoop:
    """
    Moves the pointer to a target and left-clicks it every interval.

    Clean Code principles applied:
    - One timer per handle, at most one active handle per loop
    - A failed tick is reported and never ends the schedule
    """

    def __init__(self, pointer, logger=None):
        """
        Initialize the loop.

        Args:
            pointer: Object providing ``move_to(position)`` and ``click_left()``
            logger: Optional StatusLogger receiving tick failures
        """
        self._pointer = pointer
        self._logger = logger
        self._active: Optional[ClickHandle] = None
        self._lock = threading.Lock()
        self._error_callback: Optional[Callable[[ClickInjectionFailed], None]] = None

    def register_error_callback(self, callback: Callable[[ClickInjectionFailed], None]) -> None:
        """
        Register a callback for failed ticks.

        OCP: Open for extension (can add callbacks) without modifying core logic.
        """
        self._error_callback = callback

    @property
    def active_handle(self) -> Optional[ClickHandle]:
        with self._lock:
            return self._active

    def is_running(self) -> bool:
        """Check if a schedule is currently active."""
        return self.active_handle is not None

    def start(self, position: ClickPosition, interval_ms: int) -> ClickHandle:
        """
        Start firing clicks at ``position`` every ``interval_ms``.

        The first click fires one interval after the call.

        Raises:
            AlreadyRunning: if a handle from this loop is still active
            ValueError: if the interval is not positive
        """
        if interval_ms <= 0:
            raise ValueError("Click interval must be positive")

        with self._lock:
            if self._active is not None and self._active.is_active():
                raise AlreadyRunning("Click loop is already running")

            handle = ClickHandle(position, interval_ms)
            handle._thread = threading.Thread(
                target=self._click_worker, args=(handle,), name="click-loop", daemon=True
            )
            self._active = handle

        handle._thread.start()
        return handle

    def stop(self, handle: Optional[ClickHandle]) -> None:
        """
        Cancel a schedule. No click fires after this returns.

        Idempotent: stopping an already stopped handle is a no-op.
        """
        if handle is None:
            return

        handle._cancel()
        with self._lock:
            if self._active is handle:
                self._active = None

    def abort(self, handle: Optional[ClickHandle]) -> None:
        """
        Cancel a schedule without waiting for an in-flight tick.

        Used by the emergency path: a tick stuck in a platform call must not
        block shutdown. No new tick starts after this returns.
        """
        if handle is None:
            return

        handle._stopped.set()
        with self._lock:
            if self._active is handle:
                self._active = None

    def reposition(self, handle: ClickHandle, position: ClickPosition) -> None:
        """Update the target used by the next tick. Never applied mid-tick."""
        with handle._tick_lock:
            handle._position = position

    def _click_worker(self, handle: ClickHandle) -> None:
        """
        Timer thread for one handle.

        A tick that overruns the interval delays the next one; missed
        fires are not accumulated.
        """
        deadline = time.monotonic() + handle._interval
        while True:
            if handle._stopped.wait(max(0.0, deadline - time.monotonic())):
                return

            with handle._tick_lock:
                if handle._stopped.is_set():
                    return
                self._tick(handle)

            deadline += handle._interval
            now = time.monotonic()
            if deadline < now:
                deadline = now

    def _tick(self, handle: ClickHandle) -> None:
        handle.ticks += 1
        try:
            self._pointer.move_to(handle._position)
            self._pointer.click_left()
        except Exception as exc:
            handle.failures += 1
            error = exc if isinstance(exc, ClickInjectionFailed) else ClickInjectionFailed(str(exc))
            self._report_failure(error)

    def _report_failure(self, error: ClickInjectionFailed) -> None:
        if self._logger is not None:
            self._logger.log_error(f"Click failed: {error}")
        if self._error_callback:
            try:
                self._error_callback(error)
            except Exception as exc:
                if self._logger is not None:
                    self._logger.log_error(f"Error callback failed: {exc}")
