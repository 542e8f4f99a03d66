"""
DB 스키마 정의

key-value 문서 저장용 테이블 하나(kv_store)와 스키마 버전 테이블을 관리합니다.
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from mhd_tracker.infrastructure.database.connection import get_db_path
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)

DB_SCHEMA_VERSION = 1

SCHEMA = [
    # schema_version
    """CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        applied_at TEXT NOT NULL
    )""",

    # kv_store: 문서(JSON 문자열) 단위 저장
    """CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )""",
]


def init_db(db_path: Optional[Path] = None) -> Path:
    """DB 초기화 (이미 있으면 스킵)

    Returns:
        초기화된 DB 경로
    """
    path = get_db_path(db_path)
    conn = sqlite3.connect(str(path))
    try:
        cursor = conn.cursor()
        for sql in SCHEMA:
            cursor.execute(sql)
        cursor.execute(
            "INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, ?)",
            (DB_SCHEMA_VERSION, datetime.now().isoformat())
        )
        conn.commit()
        logger.debug(f"DB 초기화 완료: {path}")
    finally:
        conn.close()
    return path
