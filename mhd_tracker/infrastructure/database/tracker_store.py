"""
TrackerStore -- 상품/설정/알림 상태 저장 어댑터

key-value 저장소의 문서 3종을 읽고 쓰며, 프로세스 전역 상태(메모리 스냅샷)를
단독으로 소유한다. 다른 컴포넌트는 스냅샷을 받아 계산한 뒤 put_*()로 되돌려 쓴다.

오류 정책:
- 읽기 실패 (DB 오류, 깨진 JSON, 형식 불일치) → 경고 로그 + 기본값
- 쓰기 실패 → 메모리 상태는 유지한 채 PersistenceError 발생
"""

import json
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from mhd_tracker.domain.models import AlertFlags, Item, NotificationState, Settings
from mhd_tracker.errors import PersistenceError
from mhd_tracker.settings.constants import (
    STORAGE_KEY_ITEMS,
    STORAGE_KEY_SETTINGS,
    STORAGE_KEY_NOTIFIED,
)
from mhd_tracker.utils.logger import LoggerMixin


def dedupe_items(items: List[Item]) -> List[Item]:
    """같은 id는 뒤의 값으로 교체 (첫 위치 유지)"""
    by_id: Dict[str, Item] = {}
    for item in items:
        by_id[item.id] = item
    return list(by_id.values())


class TrackerStore(LoggerMixin):
    """저장 어댑터

    Usage:
        store = TrackerStore(KeyValueRepository(db_path=path))
        store.load()
        items = store.items
        store.put_items(items + [new_item])
    """

    def __init__(self, repo: Any) -> None:
        """초기화

        Args:
            repo: get(key) / set(key, value) 를 제공하는 key-value 저장소
        """
        self.repo = repo
        self._items: List[Item] = []
        self._settings = Settings()
        self._notification_state: NotificationState = {}
        self.loaded = False

    # ------------------------------------------------------------------
    # 스냅샷
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[Item]:
        return list(self._items)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def notification_state(self) -> NotificationState:
        return dict(self._notification_state)

    def snapshot(self) -> Tuple[List[Item], Settings, NotificationState]:
        """(상품, 설정, 알림 상태) 스냅샷"""
        return self.items, self.settings, self.notification_state

    # ------------------------------------------------------------------
    # 로드
    # ------------------------------------------------------------------

    def load(self) -> None:
        """문서 3종 로드 (실패 시 기본값)"""
        self._items = self._load_items()
        self._settings = self._load_settings()
        self._notification_state = self._load_notification_state()
        self.loaded = True
        self.logger.info(
            f"저장소 로드 완료: items={len(self._items)},"
            f" notified={len(self._notification_state)}"
        )

    def _read_document(self, key: str) -> Optional[Any]:
        """JSON 문서 읽기 (실패 시 None)"""
        try:
            raw = self.repo.get(key)
        except sqlite3.Error as e:
            self.logger.warning(f"저장소 읽기 실패 ({key}): {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            self.logger.warning(f"저장 데이터 파싱 실패 ({key}): {e}")
            return None

    def _load_items(self) -> List[Item]:
        doc = self._read_document(STORAGE_KEY_ITEMS)
        if doc is None:
            return []
        if not isinstance(doc, list):
            self.logger.warning(f"상품 문서 형식 오류 (list 아님): {type(doc).__name__}")
            return []

        items = []
        for raw in doc:
            if not isinstance(raw, dict):
                continue
            item = Item.from_dict(raw)
            if not item.id or not item.name:
                self.logger.warning(f"id/name 없는 상품 건너뜀: {raw}")
                continue
            items.append(item)
        return dedupe_items(items)

    def _load_settings(self) -> Settings:
        doc = self._read_document(STORAGE_KEY_SETTINGS)
        if not isinstance(doc, dict):
            return Settings()
        return Settings.from_dict(doc)

    def _load_notification_state(self) -> NotificationState:
        doc = self._read_document(STORAGE_KEY_NOTIFIED)
        if not isinstance(doc, dict):
            return {}
        return {
            str(item_id): AlertFlags.from_dict(flags)
            for item_id, flags in doc.items()
            if isinstance(flags, dict)
        }

    # ------------------------------------------------------------------
    # 저장
    # ------------------------------------------------------------------

    def _write_document(self, key: str, value: Any) -> None:
        """JSON 문서 쓰기 (실패 시 PersistenceError)"""
        try:
            self.repo.set(key, json.dumps(value, ensure_ascii=False))
        except (sqlite3.Error, OSError) as e:
            self.logger.error(f"저장소 쓰기 실패 ({key}): {e}")
            raise PersistenceError(f"저장 실패: {key} ({e})", key=key) from e

    def put_items(self, items: List[Item]) -> None:
        """상품 목록 교체 + 저장"""
        self._items = list(items)
        self._write_document(STORAGE_KEY_ITEMS, [item.to_dict() for item in self._items])

    def put_settings(self, settings: Settings) -> None:
        """설정 교체 + 저장"""
        self._settings = settings
        self._write_document(STORAGE_KEY_SETTINGS, settings.to_dict())

    def put_notification_state(self, state: NotificationState) -> None:
        """알림 상태 교체 + 저장"""
        self._notification_state = dict(state)
        self._write_document(
            STORAGE_KEY_NOTIFIED,
            {item_id: flags.to_dict() for item_id, flags in self._notification_state.items()},
        )

    def put(
        self,
        items: Optional[List[Item]] = None,
        settings: Optional[Settings] = None,
        state: Optional[NotificationState] = None,
    ) -> None:
        """여러 문서 동시 교체 (None은 변경 없음)

        메모리 상태를 모두 바꾼 뒤 저장하며, 저장 중 첫 실패를 마지막에 던진다.
        """
        writers = []
        if items is not None:
            self._items = list(items)
            writers.append(lambda: self.put_items(self._items))
        if settings is not None:
            self._settings = settings
            writers.append(lambda: self.put_settings(self._settings))
        if state is not None:
            self._notification_state = dict(state)
            writers.append(lambda: self.put_notification_state(self._notification_state))

        first_error: Optional[PersistenceError] = None
        for writer in writers:
            try:
                writer()
            except PersistenceError as e:
                first_error = first_error or e
        if first_error is not None:
            raise first_error
