"""
Flask web server exposing the notice browser and notice administration.
"""
import logging
import os

from flask import Flask, request, jsonify
from flask_cors import CORS

from .. import config
from ..application.notice_board_service import NoticeBoardService
from ..infrastructure.local_browser_host import LocalBrowserHost
from ..infrastructure.memory_notice_repository import InMemoryNoticeRepository

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# 글로벌 서비스 인스턴스
browser_host = LocalBrowserHost()
board_service = None


def get_board_service() -> NoticeBoardService:
    """공지 게시판 서비스 인스턴스 가져오기."""
    global board_service
    if board_service is None:
        if os.path.exists(config.NOTICE_DATA_FILE):
            repository = InMemoryNoticeRepository.from_json_file(config.NOTICE_DATA_FILE)
        else:
            logger.warning("Notice file %s not found, starting empty", config.NOTICE_DATA_FILE)
            repository = InMemoryNoticeRepository()
        board_service = NoticeBoardService(
            repository,
            host=browser_host,
            edit_url_template=config.EDIT_URL_TEMPLATE,
            emphasis_delay=config.EMPHASIS_DELAY_SECONDS,
        )
    return board_service


def view_response(service: NoticeBoardService):
    return jsonify({
        'success': True,
        'view': service.view_to_dict(service.browser.view())
    })


def error_response(e: Exception, status: int):
    return jsonify({
        'success': False,
        'message': str(e)
    }), status


def request_data() -> dict:
    return request.get_json(silent=True) or {}


@app.route('/api/browser')
def browser_view():
    """현재 공지 브라우저 화면 상태."""
    try:
        return view_response(get_board_service())
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/open', methods=['POST'])
def open_browser():
    """공지 브라우저 열기."""
    try:
        service = get_board_service()
        service.open_browser(is_admin=bool(request_data().get('is_admin', False)))
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/close', methods=['POST'])
def close_browser():
    """닫기 버튼."""
    try:
        service = get_board_service()
        service.browser.close()
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/key', methods=['POST'])
def key_down():
    """전역 키 입력 전달 (Escape 로 닫기)."""
    try:
        service = get_board_service()
        key = request_data().get('key', '')
        if service.browser.is_mounted:
            browser_host.dispatch_key(key)
        else:
            service.browser.handle_key(key)
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/pointer', methods=['POST'])
def pointer_down():
    """배경 클릭 (내용 영역 밖이면 닫기)."""
    try:
        service = get_board_service()
        service.browser.pointer_down(inside_content=bool(request_data().get('inside_content', False)))
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/search', methods=['POST'])
def search():
    """검색어 변경."""
    try:
        service = get_board_service()
        service.browser.set_search_text(request_data().get('text', ''))
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/scope', methods=['POST'])
def search_scope():
    """검색 범위 변경 (title / all)."""
    try:
        service = get_board_service()
        service.browser.set_search_scope(request_data().get('scope', 'title'))
        return view_response(service)
    except ValueError as e:
        return error_response(e, 400)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/year', methods=['POST'])
def year_filter():
    """연도 필터 변경."""
    try:
        service = get_board_service()
        service.browser.set_year_filter(request_data().get('year', 'all'))
        return view_response(service)
    except ValueError as e:
        return error_response(e, 400)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/page', methods=['POST'])
def go_to_page():
    """페이지 이동."""
    try:
        service = get_board_service()
        service.browser.go_to_page(int(request_data().get('page', 1)))
        return view_response(service)
    except (TypeError, ValueError) as e:
        return error_response(e, 400)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/next', methods=['POST'])
def next_page():
    try:
        service = get_board_service()
        service.browser.next_page()
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/prev', methods=['POST'])
def prev_page():
    try:
        service = get_board_service()
        service.browser.prev_page()
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/select/<notice_id>', methods=['POST'])
def select_notice(notice_id):
    """공지 상세 보기."""
    try:
        service = get_board_service()
        service.browser.select(notice_id)
        return view_response(service)
    except ValueError as e:
        return error_response(e, 404)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/back', methods=['POST'])
def back_to_list():
    """목록으로 돌아가기."""
    try:
        service = get_board_service()
        service.browser.back()
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/api/browser/delete', methods=['POST'])
def delete_selected():
    """선택된 공지 삭제 (관리자)."""
    try:
        service = get_board_service()
        if not service.browser.delete():
            return jsonify({'success': False, 'message': '삭제할 수 없습니다.'}), 403
        return view_response(service)
    except Exception as e:
        return error_response(e, 500)


@app.route('/notices/<notice_id>/edit')
def edit_notice(notice_id):
    """공지 편집 대상."""
    try:
        notice = get_board_service().get_notice(notice_id)
        if notice is None:
            return jsonify({'success': False, 'message': '공지사항을 찾을 수 없습니다.'}), 404
        return jsonify({'success': True, 'notice': NoticeBoardService.notice_to_dict(notice)})
    except Exception as e:
        return error_response(e, 500)


@app.route('/notices', methods=['POST'])
def create_notice():
    """공지 작성."""
    try:
        data = request_data()
        notice = get_board_service().create_notice(data.get('title', ''), data.get('content', ''))
        print(f"📝 공지 작성: {notice.id}")
        return jsonify({'success': True, 'notice': NoticeBoardService.notice_to_dict(notice)}), 201
    except ValueError as e:
        return error_response(e, 400)
    except Exception as e:
        return error_response(e, 500)


@app.route('/notices/<notice_id>', methods=['PUT'])
def update_notice(notice_id):
    """공지 수정."""
    try:
        data = request_data()
        notice = get_board_service().update_notice(notice_id, data.get('title', ''), data.get('content', ''))
        if notice is None:
            return jsonify({'success': False, 'message': '공지사항을 찾을 수 없습니다.'}), 404
        return jsonify({'success': True, 'notice': NoticeBoardService.notice_to_dict(notice)})
    except ValueError as e:
        return error_response(e, 400)
    except Exception as e:
        return error_response(e, 500)


@app.route('/notices/<notice_id>', methods=['DELETE'])
def delete_notice(notice_id):
    """공지 삭제."""
    try:
        if not get_board_service().delete_notice(notice_id):
            return jsonify({'success': False, 'message': '공지사항을 찾을 수 없습니다.'}), 404
        print(f"🗑️  공지 삭제: {notice_id}")
        return jsonify({'success': True})
    except Exception as e:
        return error_response(e, 500)


def run_server(host=config.SERVER_HOST, port=config.SERVER_PORT, debug=False):
    """공지 게시판 웹 서버 실행."""
    print("🌐 공지 게시판 웹 서버가 시작됩니다!")
    print(f"🔗 브라우저에서 http://{host}:{port} 를 열어주세요.")
    print("🛑 서버를 중지하려면 Ctrl+C를 눌러주세요.")

    get_board_service()
    try:
        app.run(host=host, port=port, debug=debug)
    finally:
        board_service.shutdown()


if __name__ == '__main__':
    run_server()
