"""
Notice board service wiring the repository to the notice browser.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..domain.browser_host import BrowserHost
from ..domain.notice import Notice
from ..domain.notice_browser import (
    BrowserView,
    DEFAULT_EDIT_URL_TEMPLATE,
    DEFAULT_EMPHASIS_DELAY,
    NoticeBrowser,
)
from ..domain.notice_repository import NoticeRepository

logger = logging.getLogger(__name__)


def _naive_utc(created: datetime) -> datetime:
    """Comparable naive UTC datetime; naive input is taken as UTC."""
    if created.tzinfo is None:
        return created
    try:
        return created.astimezone(timezone.utc).replace(tzinfo=None)
    except OverflowError:
        # offset pushes the value past datetime.min/max
        return created.replace(tzinfo=None)


class NoticeBoardService:
    """Caller side of the notice browser.

    Owns the notice list and the browser's is_open flag: the browser's
    on_close and on_delete callbacks land here, and every change is
    re-supplied to the browser as a fresh, newest-first notice list.
    """

    def __init__(
        self,
        repository: NoticeRepository,
        host: Optional[BrowserHost] = None,
        edit_url_template: str = DEFAULT_EDIT_URL_TEMPLATE,
        emphasis_delay: Optional[float] = DEFAULT_EMPHASIS_DELAY,
    ):
        """Initialize the service.

        Args:
            repository: Notice repository implementation
            host: Host environment the browser is mounted on, if any
            edit_url_template: Edit target template passed to the browser
            emphasis_delay: Emphasis delay passed to the browser
        """
        self.repository = repository
        self.browser = NoticeBrowser(
            notices=self.ordered_notices(),
            on_close=self.close_browser,
            on_delete=self.delete_notice,
            edit_url_template=edit_url_template,
            emphasis_delay=emphasis_delay,
            on_emphasis=lambda notice: logger.debug("Emphasizing back control for %s", notice.id),
        )
        if host is not None:
            self.browser.mount(host)

    def ordered_notices(self) -> List[Notice]:
        """Notices newest first; notices without a usable date go last."""
        def sort_key(notice: Notice):
            created = notice.created_datetime
            if created is None:
                return (0, datetime.min)
            return (1, _naive_utc(created))

        return sorted(self.repository.list_notices(), key=sort_key, reverse=True)

    def refresh(self) -> None:
        """Re-supply the current notices to the browser."""
        self.browser.update(notices=self.ordered_notices())

    def open_browser(self, is_admin: bool = False) -> BrowserView:
        self.browser.update(notices=self.ordered_notices(), is_admin=is_admin, is_open=True)
        return self.browser.view()

    def close_browser(self) -> None:
        self.browser.update(is_open=False)

    def shutdown(self) -> None:
        """Unmount the browser from its host."""
        self.browser.unmount()

    def get_notice(self, notice_id: str) -> Optional[Notice]:
        return self.repository.get_notice(notice_id)

    def create_notice(self, title: str, content: str, created_at: Optional[datetime] = None) -> Notice:
        """Create a notice and publish it to the browser.

        Raises:
            ValueError: If the title or content is empty
        """
        if not title:
            raise ValueError("Notice title cannot be empty")
        if not content:
            raise ValueError("Notice content cannot be empty")

        notice = Notice(
            id=self._next_id(),
            title=title,
            content=content,
            created_at=created_at or datetime.now(),
        )
        self.repository.add_notice(notice)
        logger.info("Created notice %s", notice.id)
        self.refresh()
        return notice

    def update_notice(self, notice_id: str, title: str, content: str) -> Optional[Notice]:
        """Change a notice's title and content.

        Returns:
            Updated notice, or None if it does not exist
        """
        if not title:
            raise ValueError("Notice title cannot be empty")
        if not content:
            raise ValueError("Notice content cannot be empty")

        existing = self.repository.get_notice(notice_id)
        if existing is None:
            return None

        updated = Notice(id=existing.id, title=title, content=content, created_at=existing.created_at)
        self.repository.update_notice(updated)
        logger.info("Updated notice %s", notice_id)
        self.refresh()
        return updated

    def delete_notice(self, notice_id: str) -> bool:
        """Remove a notice and re-supply the list to the browser."""
        removed = self.repository.delete_notice(notice_id)
        if removed:
            logger.info("Deleted notice %s", notice_id)
        else:
            logger.warning("Delete requested for unknown notice %s", notice_id)
        self.refresh()
        return removed

    def _next_id(self) -> str:
        next_id = getattr(self.repository, 'next_id', None)
        if next_id is not None:
            return next_id()
        return str(len(self.repository.list_notices()) + 1)

    @staticmethod
    def notice_to_dict(notice: Notice) -> Dict[str, Any]:
        """JSON-friendly representation of a notice."""
        created = notice.created_datetime
        if created is not None:
            created_at = created.isoformat()
        elif notice.created_at is None:
            created_at = None
        else:
            created_at = str(notice.created_at)

        return {
            'id': notice.id,
            'title': notice.title,
            'content': notice.content,
            'created_at': created_at,
            'year': notice.year,
        }

    @classmethod
    def view_to_dict(cls, view: BrowserView) -> Dict[str, Any]:
        """JSON-friendly representation of a browser view."""
        return {
            'mode': view.mode,
            'items': [cls.notice_to_dict(notice) for notice in view.items],
            'current_page': view.current_page,
            'total_pages': view.total_pages,
            'filtered_count': view.filtered_count,
            'show_pagination': view.show_pagination,
            'has_prev': view.has_prev,
            'has_next': view.has_next,
            'page_numbers': list(view.page_numbers),
            'search_text': view.search_text,
            'search_scope': view.search_scope.value,
            'year_filter': view.year_filter.value,
            'year_options': list(view.year_options),
            'selected': cls.notice_to_dict(view.selected) if view.selected else None,
            'show_admin_actions': view.show_admin_actions,
            'edit_target': view.edit_target,
        }
