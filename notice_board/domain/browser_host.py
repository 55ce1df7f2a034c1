"""
Host environment interface for the notice browser.

The host owns process-wide UI state that the browser may only borrow for
its lifetime: the global key listener list, the background scroll lock
and a timer facility.
"""
from abc import ABC, abstractmethod
from typing import Callable


KeyHandler = Callable[[str], object]


class TimerHandle(ABC):
    """Handle of a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback if it has not fired yet."""
        pass


class BrowserHost(ABC):
    """Host environment interface."""

    @abstractmethod
    def add_key_listener(self, handler: KeyHandler) -> None:
        """Register a global key-down handler.

        Args:
            handler: Called with the key name, e.g. 'Escape'
        """
        pass

    @abstractmethod
    def remove_key_listener(self, handler: KeyHandler) -> None:
        """Unregister a handler previously passed to add_key_listener."""
        pass

    @abstractmethod
    def lock_scroll(self) -> None:
        """Suppress background scrolling."""
        pass

    @abstractmethod
    def unlock_scroll(self) -> None:
        """Restore background scrolling."""
        pass

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds.

        Args:
            delay: Delay in seconds
            callback: Zero-argument callable

        Returns:
            Handle that can cancel the callback
        """
        pass
