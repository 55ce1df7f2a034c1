"""
Process-local host environment for the notice browser.
"""
import logging
import threading
from typing import Callable, List

from ..domain.browser_host import BrowserHost, KeyHandler, TimerHandle

logger = logging.getLogger(__name__)


class ThreadingTimerHandle(TimerHandle):
    """TimerHandle wrapping threading.Timer."""

    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class LocalBrowserHost(BrowserHost):
    """Keeps listeners and scroll state in memory.

    scroll_locked mirrors body overflow: hidden. Timers run on
    threading.Timer daemons.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.key_listeners: List[KeyHandler] = []
        self.scroll_locked = False

    def add_key_listener(self, handler: KeyHandler) -> None:
        with self._lock:
            self.key_listeners.append(handler)

    def remove_key_listener(self, handler: KeyHandler) -> None:
        with self._lock:
            if handler in self.key_listeners:
                self.key_listeners.remove(handler)

    def dispatch_key(self, key: str) -> int:
        """Deliver a key-down to every listener.

        Returns:
            Number of listeners notified
        """
        with self._lock:
            listeners = list(self.key_listeners)
        for listener in listeners:
            listener(key)
        return len(listeners)

    def lock_scroll(self) -> None:
        self.scroll_locked = True

    def unlock_scroll(self) -> None:
        self.scroll_locked = False

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return ThreadingTimerHandle(timer)
