"""
Command Line Interface for the notice board.
"""
import argparse
import logging
import sys
from typing import Optional

from .. import config
from ..application.notice_board_service import NoticeBoardService
from ..infrastructure.memory_notice_repository import InMemoryNoticeRepository


class NoticeBoardCLI:
    """Command Line Interface for the notice board."""

    def __init__(self):
        """Initialize CLI."""
        self.service = None

    def _setup_service(self, data_file: str) -> None:
        """Setup board service.

        Args:
            data_file: JSON file with the notices
        """
        repository = InMemoryNoticeRepository.from_json_file(data_file)
        self.service = NoticeBoardService(repository, emphasis_delay=None)

    def browse(
        self,
        data_file: str,
        search: str = "",
        scope: str = "title",
        year: str = "all",
        page: int = 1,
        notice_id: Optional[str] = None,
    ) -> None:
        """Print one page of notices, or one notice in detail.

        Args:
            data_file: JSON file with the notices
            search: Search text (case-sensitive)
            scope: 'title' or 'all' (title and content)
            year: 'all' or a four-digit year
            page: Page number (1-based, clamped)
            notice_id: Show this notice instead of the list
        """
        self._setup_service(data_file)
        browser = self.service.browser

        self.service.open_browser()
        browser.set_search_text(search)
        browser.set_search_scope(scope)
        browser.set_year_filter(year)
        browser.go_to_page(page)
        if notice_id:
            browser.select(notice_id)

        view = browser.view()

        print("📋 공지사항 조회")
        print(f"🔍 검색어: '{view.search_text}' ({view.search_scope.value})")
        print(f"📅 연도: {view.year_filter}  (선택 가능: {', '.join(view.year_options) or '-'})")
        print("=" * 50)

        if view.mode == "detail":
            notice = view.selected
            created = notice.created_datetime
            print(f"📌 {notice.title}")
            print(f"   발표일: {created.strftime('%Y-%m-%d') if created else '알 수 없음'}")
            print()
            print(notice.content)
            return

        if not view.items:
            print("공지사항이 없습니다.")
        for notice in view.items:
            created = notice.created_datetime
            created_str = created.strftime('%Y-%m-%d') if created else '----------'
            print(f"[{notice.id}] {created_str}  {notice.title}")

        print("=" * 50)
        print(f"📊 {view.filtered_count}건, 페이지 {view.current_page}/{max(view.total_pages, 1)}")

    def serve_web(self, host: str, port: int, debug: bool = False) -> None:
        """Start the web server."""
        from .board_web_server import run_server
        run_server(host=host, port=port, debug=debug)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Notice board - browse and administer notices',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Browse the second page of notices from 2024
  python main.py browse --year 2024 --page 2

  # Search titles and contents
  python main.py browse --search 점검 --scope all

  # Start web server
  python main.py serve --port 8081
        """
    )
    parser.add_argument('--log-level', default=config.LOG_LEVEL, help='Logging level')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Browse command
    browse_parser = subparsers.add_parser('browse', help='Print a page of notices')
    browse_parser.add_argument('-f', '--file', default=config.NOTICE_DATA_FILE, help='Notice JSON file')
    browse_parser.add_argument('--search', default='', help='Search text')
    browse_parser.add_argument('--scope', choices=['title', 'all'], default='title', help='Search scope')
    browse_parser.add_argument('--year', default='all', help='Year filter')
    browse_parser.add_argument('--page', type=int, default=1, help='Page number')
    browse_parser.add_argument('--id', dest='notice_id', help='Show one notice in detail')

    # Web server command
    serve_parser = subparsers.add_parser('serve', help='Start web server')
    serve_parser.add_argument('--host', default=config.SERVER_HOST, help='Server host')
    serve_parser.add_argument('--port', type=int, default=config.SERVER_PORT, help='Server port')
    serve_parser.add_argument('--debug', action='store_true', help='Debug mode')

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    cli = NoticeBoardCLI()

    try:
        if args.command == 'browse':
            cli.browse(
                data_file=args.file,
                search=args.search,
                scope=args.scope,
                year=args.year,
                page=args.page,
                notice_id=args.notice_id
            )
        elif args.command == 'serve':
            cli.serve_web(
                host=args.host,
                port=args.port,
                debug=args.debug
            )
    except KeyboardInterrupt:
        print("\n⏹️ Stopped by user")
        sys.exit(0)
    except (OSError, ValueError) as e:
        print(f"❌ Error: {str(e)}")
        sys.exit(1)


if __name__ == '__main__':
    main()
