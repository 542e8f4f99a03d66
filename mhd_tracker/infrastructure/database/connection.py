"""
DB 커넥션 헬퍼

단일 SQLite 파일(data/mhd_tracker.db)에 연결합니다.
경로는 MHD_DB_PATH 환경변수 또는 인자로 지정합니다.
"""

import sqlite3
from pathlib import Path
from typing import Optional

from mhd_tracker.settings.app_config import DB_PATH

# 잠금 대기 시간 (초)
CONNECT_TIMEOUT = 10


def get_db_path(db_path: Optional[Path] = None) -> Path:
    """DB 경로 반환 (상위 디렉토리 자동 생성)"""
    path = Path(db_path) if db_path else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """DB 연결 (row_factory = sqlite3.Row)"""
    conn = sqlite3.connect(str(get_db_path(db_path)), timeout=CONNECT_TIMEOUT)
    conn.row_factory = sqlite3.Row
    return conn
