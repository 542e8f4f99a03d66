"""
BaseRepository -- 모든 Repository의 기반 클래스

DB 경로를 받아 커넥션을 제공하고, 최초 사용 시 스키마를 초기화합니다.
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from mhd_tracker.infrastructure.database.connection import get_connection, get_db_path
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """기본 저장소 클래스

    Usage:
        class KeyValueRepository(BaseRepository):
            ...

        repo = KeyValueRepository(db_path=tmp_path / "test.db")
        conn = repo._get_conn()
    """

    def __init__(self, db_path: Optional[Path] = None):
        """초기화

        Args:
            db_path: 직접 DB 경로 지정 (테스트용). 없으면 MHD_DB_PATH 사용.
        """
        self._db_path = get_db_path(db_path)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        from mhd_tracker.infrastructure.database.schema import init_db
        init_db(self._db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        """DB 연결 반환"""
        return get_connection(self._db_path)

    def _now(self) -> str:
        """현재 시각 ISO 포맷"""
        return datetime.now().isoformat()
