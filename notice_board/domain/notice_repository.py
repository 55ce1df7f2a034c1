"""
Notice repository interface following Repository pattern.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from .notice import Notice


class NoticeRepository(ABC):
    """Notice repository interface."""

    @abstractmethod
    def list_notices(self) -> List[Notice]:
        """Get all notices in storage order.

        Returns:
            List of Notice objects
        """
        pass

    @abstractmethod
    def get_notice(self, notice_id: str) -> Optional[Notice]:
        """Get notice by ID.

        Args:
            notice_id: Notice ID

        Returns:
            Notice object or None if not found
        """
        pass

    @abstractmethod
    def add_notice(self, notice: Notice) -> Notice:
        """Store a new notice.

        Raises:
            ValueError: If a notice with the same ID exists
        """
        pass

    @abstractmethod
    def update_notice(self, notice: Notice) -> Notice:
        """Replace a stored notice with the same ID.

        Raises:
            KeyError: If the notice does not exist
        """
        pass

    @abstractmethod
    def delete_notice(self, notice_id: str) -> bool:
        """Remove a notice.

        Returns:
            True if a notice was removed
        """
        pass
