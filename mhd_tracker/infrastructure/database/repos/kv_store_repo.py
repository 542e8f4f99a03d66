"""
KeyValueRepository -- 문서 단위 key-value 저장소

상품 목록 / 설정 / 알림 상태를 각각 하나의 JSON 문자열로 저장한다.
sqlite3.Error는 호출자(TrackerStore)에게 그대로 전달한다.
"""

from typing import Optional

from mhd_tracker.infrastructure.database.base_repository import BaseRepository
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueRepository(BaseRepository):
    """key-value 저장소 (SQLite kv_store 테이블)"""

    def get(self, key: str) -> Optional[str]:
        """값 조회

        Args:
            key: 저장소 키

        Returns:
            저장된 문자열 (없으면 None)
        """
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row is not None else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        """값 저장 (INSERT OR REPLACE)

        Args:
            key: 저장소 키
            value: 저장할 문자열
        """
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                   VALUES (?, ?, ?)""",
                (key, value, self._now())
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> bool:
        """값 삭제

        Returns:
            삭제 여부
        """
        conn = self._get_conn()
        try:
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
