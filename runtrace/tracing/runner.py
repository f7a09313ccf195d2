"""
Background Loop Runner

Drives tracer coroutines for synchronous callers on a dedicated event
loop thread, so the sync path works whether or not the calling thread
already runs a loop.
"""

import asyncio
import threading
from typing import Any, Coroutine, Optional, TypeVar

T = TypeVar("T")


class BackgroundLoop:
    """
    One daemon thread running one event loop.

    Thread-safe: coroutines may be submitted from any thread.
    """

    def __init__(self, name: str = "runtrace-loop"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None or self._loop.is_closed():
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name=self._name, daemon=True)
                thread.start()
                self._loop = loop
                self._thread = thread
            return self._loop

    def run(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        """Run `coro` on the background loop and block for its result."""
        loop = self._ensure_started()
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        return future.result(timeout)

    def stop(self) -> None:
        """Stop the loop thread (tests and interpreter shutdown)."""
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join()
        loop.close()


# Global singleton (process-scoped)
_global_loop: Optional[BackgroundLoop] = None
_global_lock = threading.Lock()


def get_background_loop() -> BackgroundLoop:
    """Get the shared background loop."""
    global _global_loop
    with _global_lock:
        if _global_loop is None:
            _global_loop = BackgroundLoop()
        return _global_loop
