"""Single-threaded execution context for session state changes."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

_SHUTDOWN = object()


class SerialDispatchQueue:
    """Runs submitted callables one at a time, in order, on one worker thread.

    Hotkey callbacks, timer callbacks and UI commands arrive on different
    threads; funnelling them through this queue keeps every session
    transition on a single thread of control.
    """

    def __init__(self, name: str = "session-dispatch") -> None:
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._worker, name=name, daemon=True)
        self._thread.start()

    def is_dispatch_thread(self) -> bool:
        return threading.current_thread() is self._thread

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Queue ``fn(*args)`` and return a future for its result."""
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("Dispatch queue has been shut down")
            self._queue.put((fn, args, future))
        return future

    def call(self, fn: Callable[..., Any], *args: Any, timeout: Optional[float] = None) -> Any:
        """Run ``fn(*args)`` on the dispatch thread and return its result.

        Calls made from the dispatch thread itself run inline.
        """
        if self.is_dispatch_thread():
            return fn(*args)
        return self.submit(fn, *args).result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_SHUTDOWN)

        if wait and not self.is_dispatch_thread():
            self._thread.join(timeout=2.0)

    def _worker(self) -> None:
        while True:
            item = self._queue.get()
            if item is _SHUTDOWN:
                return

            fn, args, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)
