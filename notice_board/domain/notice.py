"""
Notice domain entity and value objects.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, date
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SearchScope(Enum):
    """Which notice fields a search text is matched against."""
    TITLE_ONLY = "title"        # 제목
    TITLE_AND_CONTENT = "all"   # 제목+내용

    @classmethod
    def parse(cls, value: str) -> "SearchScope":
        """Convert a wire value ('title' / 'all') to a scope."""
        for scope in cls:
            if scope.value == value or scope.name == value:
                return scope
        raise ValueError(f"Unknown search scope: {value}")


def parse_created_at(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a created_at value to a datetime.

    Args:
        value: datetime, date, ISO 8601 string or anything else

    Returns:
        datetime, or None when the value cannot be understood
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        # fromisoformat() before 3.11 rejects the trailing 'Z'
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
        for fmt in ('%Y-%m-%d %H:%M:%S', '%Y-%m-%d', '%Y/%m/%d', '%Y.%m.%d'):
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    return None


@dataclass(frozen=True)
class Notice:
    """Notice domain entity."""
    id: str
    title: str
    content: str = ""
    created_at: Any = None

    def __post_init__(self):
        if self.id is None or str(self.id) == "":
            raise ValueError("Notice ID cannot be empty")
        for field_name in ("title", "content"):
            value = getattr(self, field_name)
            if value is None:
                object.__setattr__(self, field_name, "")
            elif not isinstance(value, str):
                object.__setattr__(self, field_name, str(value))

    @property
    def created_datetime(self) -> Optional[datetime]:
        """created_at as a datetime, None when missing or malformed."""
        return parse_created_at(self.created_at)

    @property
    def year(self) -> Optional[str]:
        """Four-digit year of created_at, None for the unknown-year bucket."""
        created = self.created_datetime
        if created is None:
            if self.created_at not in (None, ""):
                logger.debug("Unparseable created_at for notice %s: %r", self.id, self.created_at)
            return None
        return f"{created.year:04d}"

    def matches_text(self, search_text: str, scope: SearchScope) -> bool:
        """Literal, case-sensitive substring match of search_text.

        Args:
            search_text: Text to look for (empty matches everything)
            scope: Which fields to search

        Returns:
            True if the notice matches
        """
        if search_text in self.title:
            return True
        if scope == SearchScope.TITLE_AND_CONTENT:
            return search_text in self.content
        return False
