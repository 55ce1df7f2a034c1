"""
Notice browser: filterable, paginated list and detail view of notices.
"""
import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .browser_host import BrowserHost, TimerHandle
from .notice import Notice, SearchScope
from .year_filter import YearFilter

logger = logging.getLogger(__name__)

PAGE_SIZE = 5
DEFAULT_EDIT_URL_TEMPLATE = "/notices/{id}/edit"
DEFAULT_EMPHASIS_DELAY = 2.0

_UNSET = object()


@dataclass(frozen=True)
class BrowserView:
    """Immutable snapshot of what the browser shows."""
    mode: str  # 'hidden', 'list' or 'detail'
    items: Tuple[Notice, ...]
    current_page: int
    total_pages: int
    filtered_count: int
    show_pagination: bool
    has_prev: bool
    has_next: bool
    page_numbers: Tuple[int, ...]
    search_text: str
    search_scope: SearchScope
    year_filter: YearFilter
    year_options: Tuple[str, ...]
    selected: Optional[Notice]
    show_admin_actions: bool
    edit_target: Optional[str]


class NoticeBrowser:
    """Browser state machine for a notice list.

    The caller owns the notices and the is_open flag and re-supplies them
    through update(). The browser never removes notices or toggles is_open
    itself: dismiss gestures call on_close and delete calls on_delete.
    """

    def __init__(
        self,
        notices: Iterable[Notice] = (),
        is_open: bool = False,
        is_admin: bool = False,
        on_close: Optional[Callable[[], None]] = None,
        on_delete: Optional[Callable[[str], None]] = None,
        edit_url_template: str = DEFAULT_EDIT_URL_TEMPLATE,
        emphasis_delay: Optional[float] = DEFAULT_EMPHASIS_DELAY,
        on_emphasis: Optional[Callable[[Notice], None]] = None,
    ):
        """Initialize the browser.

        Args:
            notices: Ordered notices to browse
            is_open: Visibility flag owned by the caller
            is_admin: Whether edit/delete actions are offered
            on_close: Called on Escape, outside pointer-down or close control
            on_delete: Called with the selected notice id on delete
            edit_url_template: Edit target, formatted with id=
            emphasis_delay: Seconds before the back control is emphasized,
                None to disable
            on_emphasis: Called with the selected notice when emphasis fires
        """
        self._notices: List[Notice] = list(notices)
        self.is_open = is_open
        self.is_admin = is_admin
        self.on_close = on_close or (lambda: None)
        self.on_delete = on_delete or (lambda notice_id: None)
        self.edit_url_template = edit_url_template
        self.emphasis_delay = emphasis_delay
        self.on_emphasis = on_emphasis

        self.search_text = ""
        self.search_scope = SearchScope.TITLE_ONLY
        self.year_filter = YearFilter()
        self.current_page = 1
        self.selected_notice: Optional[Notice] = None

        self._host: Optional[BrowserHost] = None
        self._scroll_locked = False
        self._emphasis_timer: Optional[TimerHandle] = None
        self._emphasis_token = 0

    # ------------------------------------------------------------------
    # Caller inputs
    # ------------------------------------------------------------------

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    def update(self, notices=_UNSET, is_open=_UNSET, is_admin=_UNSET,
               on_close=_UNSET, on_delete=_UNSET) -> None:
        """Apply new caller inputs. Omitted inputs keep their value."""
        if on_close is not _UNSET:
            self.on_close = on_close or (lambda: None)
        if on_delete is not _UNSET:
            self.on_delete = on_delete or (lambda notice_id: None)
        if is_admin is not _UNSET:
            self.is_admin = bool(is_admin)
        if notices is not _UNSET:
            self._set_notices(notices)
        if is_open is not _UNSET:
            self._set_open(bool(is_open))

    def _set_notices(self, notices: Iterable[Notice]) -> None:
        self._notices = list(notices)

        if not self.year_filter.is_all and self.year_filter.year not in self.year_options():
            logger.debug("Year %s no longer present, falling back to all years", self.year_filter.year)
            self.year_filter = YearFilter()
            self.current_page = 1

        if self.selected_notice is not None:
            replacement = self._find(self.selected_notice.id)
            if replacement is None:
                logger.debug("Selected notice %s was removed", self.selected_notice.id)
                self._clear_selection()
            else:
                self.selected_notice = replacement

        total = self.total_pages()
        if total == 0:
            self.current_page = 1
        elif self.current_page > total:
            self.current_page = total

    def _set_open(self, is_open: bool) -> None:
        if is_open == self.is_open:
            return
        self.is_open = is_open
        if not is_open:
            self._clear_selection()
        self._sync_scroll_lock()
        logger.debug("Browser %s", "opened" if is_open else "closed")

    # ------------------------------------------------------------------
    # Host side effects
    # ------------------------------------------------------------------

    @property
    def is_mounted(self) -> bool:
        return self._host is not None

    def mount(self, host: BrowserHost) -> None:
        """Attach to a host: register the key listener, lock scroll if open."""
        if self._host is not None:
            raise RuntimeError("Notice browser is already mounted")
        self._host = host
        host.add_key_listener(self.handle_key)
        self._sync_scroll_lock()

    def unmount(self) -> None:
        """Detach from the host, releasing everything mount acquired."""
        host = self._host
        if host is None:
            return
        try:
            self._cancel_emphasis()
            if self._scroll_locked:
                self._scroll_locked = False
                host.unlock_scroll()
        finally:
            host.remove_key_listener(self.handle_key)
            self._host = None

    @contextmanager
    def mounted(self, host: BrowserHost):
        """Mount for the duration of a with block."""
        self.mount(host)
        try:
            yield self
        finally:
            self.unmount()

    def _sync_scroll_lock(self) -> None:
        if self._host is None:
            return
        wanted = self.is_open
        if wanted and not self._scroll_locked:
            self._host.lock_scroll()
            self._scroll_locked = True
        elif not wanted and self._scroll_locked:
            self._scroll_locked = False
            self._host.unlock_scroll()

    def _schedule_emphasis(self) -> None:
        self._cancel_emphasis()
        if self._host is None or self.emphasis_delay is None:
            return
        self._emphasis_token += 1
        token = self._emphasis_token
        self._emphasis_timer = self._host.schedule(self.emphasis_delay, lambda: self._emphasize(token))

    def _cancel_emphasis(self) -> None:
        # a callback already running on a timer thread sees a stale token
        self._emphasis_token += 1
        if self._emphasis_timer is not None:
            self._emphasis_timer.cancel()
            self._emphasis_timer = None

    def _emphasize(self, token: int) -> None:
        if token != self._emphasis_token:
            return
        self._emphasis_timer = None
        if self.selected_notice is not None and self.on_emphasis is not None:
            self.on_emphasis(self.selected_notice)

    @property
    def emphasis_pending(self) -> bool:
        return self._emphasis_timer is not None

    # ------------------------------------------------------------------
    # Filtering and pagination
    # ------------------------------------------------------------------

    def year_options(self) -> Tuple[str, ...]:
        """Distinct known years of the notices, in first-seen order."""
        seen = []
        for notice in self._notices:
            year = notice.year
            if year is not None and year not in seen:
                seen.append(year)
        return tuple(seen)

    def filtered_notices(self) -> List[Notice]:
        return [
            notice for notice in self._notices
            if notice.matches_text(self.search_text, self.search_scope)
            and self.year_filter.matches(notice)
        ]

    def total_pages(self) -> int:
        return math.ceil(len(self.filtered_notices()) / PAGE_SIZE)

    def page_items(self) -> List[Notice]:
        start = (self.current_page - 1) * PAGE_SIZE
        return self.filtered_notices()[start:start + PAGE_SIZE]

    def set_search_text(self, text: str) -> None:
        self.search_text = text or ""
        self.current_page = 1

    def set_search_scope(self, scope: Union[SearchScope, str]) -> None:
        if not isinstance(scope, SearchScope):
            scope = SearchScope.parse(scope)
        self.search_scope = scope
        self.current_page = 1

    def set_year_filter(self, year_filter: Union[YearFilter, str, None]) -> None:
        """Change the year facet.

        Raises:
            ValueError: If the year is not one of year_options()
        """
        if not isinstance(year_filter, YearFilter):
            year_filter = YearFilter.parse(year_filter)
        if not year_filter.is_all and year_filter.year not in self.year_options():
            raise ValueError(f"No notices from year {year_filter.year}")
        self.year_filter = year_filter
        self.current_page = 1

    def go_to_page(self, page: int) -> int:
        """Move to a page, clamped to the available range."""
        last = max(self.total_pages(), 1)
        self.current_page = min(max(int(page), 1), last)
        return self.current_page

    def next_page(self) -> int:
        return self.go_to_page(self.current_page + 1)

    def prev_page(self) -> int:
        return self.go_to_page(self.current_page - 1)

    # ------------------------------------------------------------------
    # Selection and admin actions
    # ------------------------------------------------------------------

    def _find(self, notice_id) -> Optional[Notice]:
        for notice in self._notices:
            if str(notice.id) == str(notice_id):
                return notice
        return None

    def select(self, notice: Union[Notice, str]) -> Optional[Notice]:
        """Show one notice in the detail view. Ignored while closed.

        Raises:
            ValueError: If the notice is not part of the current notices
        """
        if not self.is_open:
            return None
        notice_id = notice.id if isinstance(notice, Notice) else notice
        found = self._find(notice_id)
        if found is None:
            raise ValueError(f"Notice {notice_id} not found")
        self.selected_notice = found
        self._schedule_emphasis()
        return found

    def back(self) -> None:
        """Return to the list view; the current page is kept."""
        self._clear_selection()

    def _clear_selection(self) -> None:
        self._cancel_emphasis()
        self.selected_notice = None

    @property
    def admin_actions_available(self) -> bool:
        return self.is_open and self.is_admin and self.selected_notice is not None

    def edit_target(self) -> Optional[str]:
        if not self.admin_actions_available:
            return None
        return self.edit_url_template.format(id=self.selected_notice.id)

    def delete(self) -> bool:
        """Ask the caller to delete the selected notice.

        The notice stays in place until the caller re-supplies the list.
        """
        if not self.admin_actions_available:
            return False
        logger.info("Delete requested for notice %s", self.selected_notice.id)
        self.on_delete(self.selected_notice.id)
        return True

    # ------------------------------------------------------------------
    # Dismiss gestures
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        if self.is_open and key == "Escape":
            self.on_close()
            return True
        return False

    def pointer_down(self, inside_content: bool) -> bool:
        if self.is_open and not inside_content:
            self.on_close()
            return True
        return False

    def close(self) -> bool:
        if self.is_open:
            self.on_close()
            return True
        return False

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def view(self) -> BrowserView:
        """Build a snapshot of the current presentation."""
        filtered = self.filtered_notices()
        total = math.ceil(len(filtered) / PAGE_SIZE)
        start = (self.current_page - 1) * PAGE_SIZE

        if not self.is_open:
            mode, items = "hidden", ()
        elif self.selected_notice is not None:
            mode, items = "detail", ()
        else:
            mode, items = "list", tuple(filtered[start:start + PAGE_SIZE])

        return BrowserView(
            mode=mode,
            items=items,
            current_page=self.current_page,
            total_pages=total,
            filtered_count=len(filtered),
            show_pagination=mode == "list" and total > 1,
            has_prev=self.current_page > 1,
            has_next=self.current_page < total,
            page_numbers=tuple(range(1, total + 1)),
            search_text=self.search_text,
            search_scope=self.search_scope,
            year_filter=self.year_filter,
            year_options=self.year_options(),
            selected=self.selected_notice if self.is_open else None,
            show_admin_actions=self.admin_actions_available,
            edit_target=self.edit_target(),
        )
