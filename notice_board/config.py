# config.py
import os
from dotenv import load_dotenv

load_dotenv()  # 프로젝트 루트의 .env 로드

# 공지사항 데이터 (JSON 배열: id, title, content, created_at)
NOTICE_DATA_FILE = os.getenv("NOTICE_DATA_FILE", "notices.json")

# 웹 서버
SERVER_HOST = os.getenv("SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8081"))

# 공지 브라우저
EDIT_URL_TEMPLATE = os.getenv("EDIT_URL_TEMPLATE", "/notices/{id}/edit")
EMPHASIS_DELAY_SECONDS = float(os.getenv("EMPHASIS_DELAY_SECONDS", "2.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
