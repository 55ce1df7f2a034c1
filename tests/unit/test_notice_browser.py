"""
Unit tests for the NoticeBrowser state machine.
"""
import pytest
from unittest.mock import Mock

from notice_board.domain.browser_host import BrowserHost, TimerHandle
from notice_board.domain.notice import Notice, SearchScope
from notice_board.domain.notice_browser import NoticeBrowser, PAGE_SIZE
from notice_board.domain.year_filter import YearFilter


class FakeTimer(TimerHandle):
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class FakeHost(BrowserHost):
    """Host that records what the browser acquires."""

    def __init__(self):
        self.key_listeners = []
        self.scroll_locks = 0
        self.timers = []

    def add_key_listener(self, handler):
        self.key_listeners.append(handler)

    def remove_key_listener(self, handler):
        self.key_listeners.remove(handler)

    def lock_scroll(self):
        self.scroll_locks += 1

    def unlock_scroll(self):
        self.scroll_locks -= 1

    def schedule(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def press(self, key):
        for listener in list(self.key_listeners):
            listener(key)


def make_notices(count, year='2024'):
    return [
        Notice(
            id=str(i),
            title=f'Notice {i}',
            content=f'Body of notice {i}',
            created_at=f'{year}-01-{i % 28 + 1:02d}'
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def seven_notices():
    """4 notices from 2023 and 3 from 2024, interleaved."""
    return [
        Notice(id='1', title='Finals schedule', content='Finals are on Saturday', created_at='2024-05-01'),
        Notice(id='2', title='Judge briefing', content='Meet in room 101', created_at='2023-11-20'),
        Notice(id='3', title='Scoring rules', content='Scores range from 1 to 10', created_at='2024-04-02'),
        Notice(id='4', title='Registration open', content='Register online', created_at='2023-09-01'),
        Notice(id='5', title='Venue change', content='The finals move to Hall B', created_at='2023-08-15'),
        Notice(id='6', title='Results posted', content='See the works page', created_at='2024-01-10'),
        Notice(id='7', title='Welcome', content='Welcome to the contest', created_at='2023-01-01'),
    ]


@pytest.fixture
def browser(seven_notices):
    return NoticeBrowser(notices=seven_notices, is_open=True)


class TestFiltering:
    """Test cases for search and year filtering."""

    def test_default_state(self, browser):
        assert browser.search_text == ''
        assert browser.search_scope == SearchScope.TITLE_ONLY
        assert browser.year_filter == YearFilter()
        assert browser.current_page == 1
        assert browser.selected_notice is None

    def test_title_only_search(self, browser):
        """Test that title scope matches titles only."""
        # When
        browser.set_search_text('finals')

        # Then
        assert browser.filtered_notices() == []

        browser.set_search_text('Finals')
        assert [n.id for n in browser.filtered_notices()] == ['1']

    def test_title_and_content_search(self, browser):
        """Test that the wide scope also matches contents."""
        # Given
        browser.set_search_text('finals')

        # When
        browser.set_search_scope(SearchScope.TITLE_AND_CONTENT)

        # Then
        assert [n.id for n in browser.filtered_notices()] == ['5']

    def test_scope_accepts_wire_value(self, browser):
        browser.set_search_scope('all')

        assert browser.search_scope == SearchScope.TITLE_AND_CONTENT

    def test_year_filter(self, browser):
        """Test that a year filter keeps only that year, in input order."""
        # When
        browser.set_year_filter('2023')

        # Then
        assert [n.id for n in browser.filtered_notices()] == ['2', '4', '5', '7']

    def test_search_and_year_are_conjunctive(self, browser):
        browser.set_search_scope('all')
        browser.set_search_text('finals')
        browser.set_year_filter('2024')

        assert browser.filtered_notices() == []

    def test_filter_is_idempotent(self, browser):
        """Test that filtering the filtered output changes nothing."""
        # Given
        browser.set_search_scope('all')
        browser.set_search_text('e')
        browser.set_year_filter('2023')
        first = browser.filtered_notices()

        # When
        browser.update(notices=first)
        second = browser.filtered_notices()

        # Then
        assert second == first

    def test_year_options_are_distinct_years_in_input_order(self, browser):
        assert browser.year_options() == ('2024', '2023')

    def test_year_options_exclude_unknown_years(self):
        browser = NoticeBrowser(notices=[
            Notice(id='1', title='a', created_at='broken'),
            Notice(id='2', title='b', created_at='2022-03-03'),
        ], is_open=True)

        assert browser.year_options() == ('2022',)

    def test_unknown_year_visible_only_under_all(self):
        """Test that undated notices stay visible under ALL only."""
        # Given
        undated = Notice(id='1', title='a', created_at=None)
        dated = Notice(id='2', title='b', created_at='2022-03-03')
        browser = NoticeBrowser(notices=[undated, dated], is_open=True)

        # Then
        assert browser.filtered_notices() == [undated, dated]
        browser.set_year_filter('2022')
        assert browser.filtered_notices() == [dated]

    def test_year_not_in_options_raises_error(self, browser):
        with pytest.raises(ValueError, match="No notices from year 1999"):
            browser.set_year_filter('1999')

    def test_year_filter_falls_back_to_all_when_year_disappears(self, browser, seven_notices):
        """Test that a notices update removing the active year resets the facet."""
        # Given
        browser.set_year_filter('2024')

        # When
        browser.update(notices=[n for n in seven_notices if n.year == '2023'])

        # Then
        assert browser.year_filter.is_all
        assert browser.current_page == 1


class TestPagination:
    """Test cases for pagination."""

    def test_seven_notices_make_two_pages(self, browser, seven_notices):
        """Test the 7-notice example: pages of 5 and 2 in input order."""
        # When
        first_page = browser.view()
        browser.next_page()
        second_page = browser.view()

        # Then
        assert first_page.total_pages == 2
        assert [n.id for n in first_page.items] == ['1', '2', '3', '4', '5']
        assert [n.id for n in second_page.items] == ['6', '7']
        assert first_page.show_pagination
        assert first_page.page_numbers == (1, 2)

    @pytest.mark.parametrize('count, expected_pages', [(0, 0), (1, 1), (5, 1), (6, 2), (10, 2), (11, 3), (23, 5)])
    def test_total_pages(self, count, expected_pages):
        browser = NoticeBrowser(notices=make_notices(count), is_open=True)

        assert browser.total_pages() == expected_pages

    def test_pages_reconstruct_filtered_sequence(self):
        """Test that concatenated pages equal the filtered list exactly once."""
        # Given
        browser = NoticeBrowser(notices=make_notices(23), is_open=True)
        collected = []

        # When
        for page in range(1, browser.total_pages() + 1):
            browser.go_to_page(page)
            collected.extend(browser.page_items())

        # Then
        assert collected == browser.filtered_notices()
        assert len({n.id for n in collected}) == 23

    def test_next_at_last_page_is_noop(self, browser):
        browser.go_to_page(2)

        assert browser.next_page() == 2
        assert browser.current_page == 2

    def test_prev_at_first_page_is_noop(self, browser):
        assert browser.prev_page() == 1
        assert browser.current_page == 1

    def test_go_to_page_clamps(self, browser):
        assert browser.go_to_page(99) == 2
        assert browser.go_to_page(-3) == 1

    def test_boundary_flags(self, browser):
        view = browser.view()
        assert not view.has_prev
        assert view.has_next

        browser.next_page()
        view = browser.view()
        assert view.has_prev
        assert not view.has_next

    def test_single_page_hides_pagination(self):
        browser = NoticeBrowser(notices=make_notices(PAGE_SIZE), is_open=True)

        assert not browser.view().show_pagination

    def test_empty_notices(self):
        """Test that an empty list renders zero pages without errors."""
        # Given
        browser = NoticeBrowser(notices=[], is_open=True)

        # When
        view = browser.view()
        browser.next_page()

        # Then
        assert view.mode == 'list'
        assert view.items == ()
        assert view.total_pages == 0
        assert not view.show_pagination
        assert browser.current_page == 1

    def test_search_resets_page(self):
        """Test that a one-hit search from page 3 lands on page 1 of 1."""
        # Given
        notices = make_notices(12)
        notices.append(Notice(id='99', title='Unique announcement', created_at='2024-02-02'))
        browser = NoticeBrowser(notices=notices, is_open=True)
        browser.go_to_page(3)
        assert browser.current_page == 3

        # When
        browser.set_search_text('Unique')

        # Then
        view = browser.view()
        assert view.total_pages == 1
        assert view.current_page == 1
        assert [n.id for n in view.items] == ['99']

    @pytest.mark.parametrize('change', [
        lambda b: b.set_search_text('Notice'),
        lambda b: b.set_search_scope('all'),
        lambda b: b.set_year_filter('2024'),
        lambda b: b.set_year_filter('all'),
    ])
    def test_every_filter_change_resets_page(self, change):
        browser = NoticeBrowser(notices=make_notices(12), is_open=True)
        browser.go_to_page(2)

        change(browser)

        assert browser.current_page == 1

    def test_shrinking_notices_clamps_page(self):
        browser = NoticeBrowser(notices=make_notices(12), is_open=True)
        browser.go_to_page(3)

        browser.update(notices=make_notices(7))

        assert browser.current_page == 2


class TestSelection:
    """Test cases for the detail view."""

    def test_select_switches_to_detail(self, browser):
        # When
        browser.select('3')

        # Then
        view = browser.view()
        assert view.mode == 'detail'
        assert view.selected.id == '3'
        assert view.items == ()
        assert not view.show_pagination

    def test_select_by_notice(self, browser, seven_notices):
        assert browser.select(seven_notices[1]) is seven_notices[1]

    def test_select_unknown_notice_raises_error(self, browser):
        with pytest.raises(ValueError, match="Notice 42 not found"):
            browser.select('42')

    def test_select_while_closed_is_ignored(self, seven_notices):
        browser = NoticeBrowser(notices=seven_notices, is_open=False)

        assert browser.select('1') is None
        assert browser.selected_notice is None

    def test_back_keeps_page(self, browser):
        """Test the selection roundtrip preserves the current page."""
        # Given
        browser.go_to_page(2)

        # When
        browser.select('6')
        browser.back()

        # Then
        view = browser.view()
        assert view.mode == 'list'
        assert view.current_page == 2
        assert [n.id for n in view.items] == ['6', '7']

    def test_removed_selection_is_cleared(self, browser, seven_notices):
        browser.select('2')

        browser.update(notices=[n for n in seven_notices if n.id != '2'])

        assert browser.selected_notice is None
        assert browser.view().mode == 'list'

    def test_selection_rebinds_to_updated_record(self, browser, seven_notices):
        browser.select('2')
        edited = Notice(id='2', title='Judge briefing (updated)', content='Room 102', created_at='2023-11-20')

        browser.update(notices=[edited if n.id == '2' else n for n in seven_notices])

        assert browser.selected_notice is edited

    def test_closing_clears_selection(self, browser):
        browser.select('1')

        browser.update(is_open=False)

        assert browser.selected_notice is None
        assert browser.view().mode == 'hidden'

    def test_closing_keeps_search_state(self, browser):
        browser.set_search_text('Judge')

        browser.update(is_open=False)
        browser.update(is_open=True)

        assert browser.search_text == 'Judge'


class TestAdminActions:
    """Test cases for edit and delete."""

    def test_actions_hidden_for_non_admin(self, browser):
        browser.select('1')

        view = browser.view()
        assert not view.show_admin_actions
        assert view.edit_target is None
        assert browser.delete() is False

    def test_actions_hidden_without_selection(self, browser):
        browser.update(is_admin=True)

        assert not browser.view().show_admin_actions
        assert browser.edit_target() is None

    def test_edit_target(self, browser):
        browser.update(is_admin=True)
        browser.select('4')

        assert browser.edit_target() == '/notices/4/edit'
        assert browser.view().edit_target == '/notices/4/edit'

    def test_custom_edit_template(self, seven_notices):
        browser = NoticeBrowser(notices=seven_notices, is_open=True, is_admin=True,
                                edit_url_template='/admin/notices/{id}')
        browser.select('1')

        assert browser.edit_target() == '/admin/notices/1'

    def test_delete_signals_intent_without_removing(self, seven_notices):
        """Test that delete calls on_delete and leaves the notices alone."""
        # Given
        on_delete = Mock()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, is_admin=True, on_delete=on_delete)
        browser.select('5')

        # When
        result = browser.delete()

        # Then
        assert result is True
        on_delete.assert_called_once_with('5')
        assert len(browser.notices) == 7
        assert browser.selected_notice.id == '5'


class TestDismiss:
    """Test cases for Escape, outside pointer-down and the close control."""

    @pytest.fixture
    def on_close(self):
        return Mock()

    @pytest.fixture
    def open_browser(self, seven_notices, on_close):
        browser = NoticeBrowser(notices=seven_notices, is_open=True, on_close=on_close)
        browser.set_search_text('e')
        browser.select('1')
        return browser

    @pytest.mark.parametrize('gesture', [
        lambda b: b.handle_key('Escape'),
        lambda b: b.pointer_down(inside_content=False),
        lambda b: b.close(),
    ])
    def test_gesture_calls_on_close_once_and_mutates_nothing(self, open_browser, on_close, gesture):
        # When
        assert gesture(open_browser) is True

        # Then
        on_close.assert_called_once_with()
        assert open_browser.is_open is True
        assert open_browser.selected_notice.id == '1'
        assert open_browser.search_text == 'e'

    def test_other_keys_ignored(self, open_browser, on_close):
        assert open_browser.handle_key('Enter') is False
        on_close.assert_not_called()

    def test_pointer_inside_content_ignored(self, open_browser, on_close):
        assert open_browser.pointer_down(inside_content=True) is False
        on_close.assert_not_called()

    def test_gestures_ignored_while_closed(self, seven_notices, on_close):
        browser = NoticeBrowser(notices=seven_notices, is_open=False, on_close=on_close)

        browser.handle_key('Escape')
        browser.pointer_down(inside_content=False)
        browser.close()

        on_close.assert_not_called()

    def test_replacing_on_close(self, open_browser, on_close):
        replacement = Mock()

        open_browser.update(on_close=replacement)
        open_browser.close()

        replacement.assert_called_once_with()
        on_close.assert_not_called()


class TestHostSideEffects:
    """Test cases for key listener, scroll lock and emphasis timer."""

    def test_mount_registers_key_listener_even_when_closed(self, seven_notices):
        host = FakeHost()
        browser = NoticeBrowser(notices=seven_notices, is_open=False)

        browser.mount(host)

        assert len(host.key_listeners) == 1
        assert host.scroll_locks == 0

    def test_escape_through_host(self, seven_notices):
        host = FakeHost()
        on_close = Mock()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, on_close=on_close)

        with browser.mounted(host):
            host.press('Escape')

        on_close.assert_called_once_with()

    def test_scroll_locked_only_while_open(self, seven_notices):
        host = FakeHost()
        browser = NoticeBrowser(notices=seven_notices, is_open=False)
        browser.mount(host)

        browser.update(is_open=True)
        assert host.scroll_locks == 1

        browser.update(is_open=True)
        assert host.scroll_locks == 1

        browser.update(is_open=False)
        assert host.scroll_locks == 0

    def test_unmount_releases_everything(self, seven_notices):
        host = FakeHost()
        browser = NoticeBrowser(notices=seven_notices, is_open=True)
        browser.mount(host)
        browser.select('1')

        browser.unmount()

        assert host.key_listeners == []
        assert host.scroll_locks == 0
        assert host.timers[0].cancelled
        assert not browser.is_mounted

    def test_rapid_toggling_does_not_leak(self, seven_notices):
        """Test that many open/close and mount cycles reverse themselves."""
        host = FakeHost()
        browser = NoticeBrowser(notices=seven_notices)

        for _ in range(10):
            with browser.mounted(host):
                for _ in range(5):
                    browser.update(is_open=True)
                    browser.update(is_open=False)
                browser.update(is_open=True)

        assert host.key_listeners == []
        assert host.scroll_locks == 0

    def test_mounted_block_releases_on_error(self, seven_notices):
        host = FakeHost()
        browser = NoticeBrowser(notices=seven_notices, is_open=True)

        with pytest.raises(RuntimeError, match="boom"):
            with browser.mounted(host):
                raise RuntimeError("boom")

        assert host.key_listeners == []
        assert host.scroll_locks == 0

    def test_double_mount_raises_error(self, seven_notices):
        browser = NoticeBrowser(notices=seven_notices)
        browser.mount(FakeHost())

        with pytest.raises(RuntimeError, match="already mounted"):
            browser.mount(FakeHost())

    def test_emphasis_fires_after_selection(self, seven_notices):
        host = FakeHost()
        on_emphasis = Mock()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, on_emphasis=on_emphasis)
        browser.mount(host)

        browser.select('3')

        assert browser.emphasis_pending
        assert host.timers[0].delay == 2.0
        host.timers[0].fire()
        on_emphasis.assert_called_once_with(browser.selected_notice)
        assert not browser.emphasis_pending

    def test_emphasis_cancelled_by_reselection_and_close(self, seven_notices):
        host = FakeHost()
        on_emphasis = Mock()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, on_emphasis=on_emphasis)
        browser.mount(host)

        browser.select('1')
        browser.select('2')
        assert host.timers[0].cancelled

        browser.update(is_open=False)
        assert host.timers[1].cancelled

        for timer in host.timers:
            timer.fire()
        on_emphasis.assert_not_called()

    def test_late_stale_emphasis_keeps_live_timer_cancellable(self, seven_notices):
        """Test that an old timer's callback running late changes nothing."""
        # Given
        host = FakeHost()
        on_emphasis = Mock()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, on_emphasis=on_emphasis)
        browser.mount(host)
        browser.select('1')
        browser.select('2')

        # When
        host.timers[0].callback()

        # Then
        on_emphasis.assert_not_called()
        assert browser.emphasis_pending

        browser.update(is_open=False)
        assert host.timers[1].cancelled
        assert not browser.emphasis_pending

    def test_callback_after_back_does_not_fire(self, seven_notices):
        host = FakeHost()
        on_emphasis = Mock()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, on_emphasis=on_emphasis)
        browser.mount(host)
        browser.select('1')

        browser.back()
        host.timers[0].callback()

        on_emphasis.assert_not_called()

    def test_emphasis_disabled(self, seven_notices):
        host = FakeHost()
        browser = NoticeBrowser(notices=seven_notices, is_open=True, emphasis_delay=None)
        browser.mount(host)

        browser.select('1')

        assert host.timers == []
