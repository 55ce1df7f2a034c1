"""
In-memory notice repository, optionally seeded from a JSON file.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..domain.notice import Notice
from ..domain.notice_repository import NoticeRepository

logger = logging.getLogger(__name__)


def notice_from_dict(data: Dict[str, Any]) -> Notice:
    """Build a Notice from a {id, title, content, created_at} mapping."""
    return Notice(
        id=str(data['id']) if data.get('id') is not None else '',
        title=data.get('title'),
        content=data.get('content'),
        created_at=data.get('created_at'),
    )


class InMemoryNoticeRepository(NoticeRepository):
    """Dictionary backed repository keeping insertion order."""

    def __init__(self, notices: Iterable[Notice] = ()):
        self._notices: Dict[str, Notice] = {}
        for notice in notices:
            self.add_notice(notice)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryNoticeRepository":
        """Load notices from a JSON array file.

        Args:
            path: JSON file path

        Returns:
            Repository holding the file's notices
        """
        with open(Path(path), 'r', encoding='utf-8') as f:
            records = json.load(f)

        if not isinstance(records, list):
            raise ValueError(f"{path} must contain a JSON array of notices")

        repository = cls(notice_from_dict(record) for record in records)
        logger.info("Loaded %d notices from %s", len(records), path)
        return repository

    def list_notices(self) -> List[Notice]:
        return list(self._notices.values())

    def get_notice(self, notice_id: str) -> Optional[Notice]:
        return self._notices.get(str(notice_id))

    def add_notice(self, notice: Notice) -> Notice:
        key = str(notice.id)
        if key in self._notices:
            raise ValueError(f"Notice {key} already exists")
        self._notices[key] = notice
        return notice

    def update_notice(self, notice: Notice) -> Notice:
        key = str(notice.id)
        if key not in self._notices:
            raise KeyError(key)
        self._notices[key] = notice
        return notice

    def delete_notice(self, notice_id: str) -> bool:
        return self._notices.pop(str(notice_id), None) is not None

    def next_id(self) -> str:
        """Next free numeric ID (max numeric ID + 1)."""
        numeric = [int(key) for key in self._notices if key.isdigit()]
        return str(max(numeric, default=0) + 1)
