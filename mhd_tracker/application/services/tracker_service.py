"""
TrackerService -- 상품/설정 변경 및 조회 서비스

모든 변경(등록/수정/삭제/설정/가져오기)은 스케줄러 락 안에서
저장소 스냅샷 → 새 값 계산 → 저장 → 즉시 평가 순서로 처리합니다.

오류 정책:
- 입력 검증 실패 → ItemValidationError (아무것도 변경되지 않음)
- 저장 실패 → 메모리 변경 유지 + 평가 실행 후 PersistenceError
- 가져오기 형식 오류 → ImportPayloadError (아무것도 변경되지 않음)
"""

import json
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from mhd_tracker.application.scheduler.job_scheduler import ExpiryCheckScheduler
from mhd_tracker.domain.item_query import SortKey, StatusFilter, query
from mhd_tracker.domain.models import (
    AnnotatedItem,
    Item,
    Settings,
    to_threshold_days,
)
from mhd_tracker.domain.notification_tracker import arm, forget
from mhd_tracker.domain.status_classifier import annotate
from mhd_tracker.errors import (
    ImportPayloadError,
    ItemNotFoundError,
    ItemValidationError,
    PersistenceError,
)
from mhd_tracker.infrastructure.database.tracker_store import TrackerStore, dedupe_items
from mhd_tracker.settings.app_config import DATA_DIR
from mhd_tracker.settings.constants import EXPORT_FILENAME_PREFIX
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)

# snake_case 입력 → 직렬화 키
_INPUT_KEY_ALIASES = {
    "received_date": "receivedDate",
    "expiry_date": "expiryDate",
}


def generate_item_id() -> str:
    """상품 ID 생성 (생성 후 변경 불가)"""
    return uuid.uuid4().hex[:16].upper()


def _date_to_str(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _normalize_input(data: Dict[str, Any]) -> Dict[str, Any]:
    """입력 dict 키/날짜 정규화"""
    normalized = {}
    for key, value in data.items():
        normalized[_INPUT_KEY_ALIASES.get(key, key)] = _date_to_str(value)
    return normalized


def parse_import_payload(payload: Any) -> Tuple[List[Item], Settings]:
    """가져오기 데이터 검증 및 변환

    기대 형식: {"items": [ {...}, ... ], "settings": {...}}
    - 각 상품은 dict이고 name이 비어 있지 않아야 함
    - id가 없는 상품은 새 id 부여

    Raises:
        ImportPayloadError: 형식 불일치
    """
    if not isinstance(payload, dict):
        raise ImportPayloadError("가져오기 데이터가 객체가 아닙니다")

    raw_items = payload.get("items")
    raw_settings = payload.get("settings")
    if not isinstance(raw_items, list):
        raise ImportPayloadError("items 목록이 없습니다")
    if not isinstance(raw_settings, dict):
        raise ImportPayloadError("settings 객체가 없습니다")

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ImportPayloadError(f"items[{index}] 형식 오류")
        item = Item.from_dict(_normalize_input(raw))
        if not item.name:
            raise ImportPayloadError(f"items[{index}] 이름 없음")
        if not item.id:
            item = Item.from_dict({**item.to_dict(), "id": generate_item_id()})
        items.append(item)

    return dedupe_items(items), Settings.from_dict(raw_settings)


class TrackerService:
    """상품/설정 변경 및 조회 서비스

    Usage:
        service = TrackerService(store, scheduler)
        item = service.upsert_item({"name": "우유", "expiry_date": "2026-10-25"})
        view = service.query_items(search="우유", status="soon", sort="daysAsc")
    """

    def __init__(
        self,
        store: TrackerStore,
        scheduler: ExpiryCheckScheduler,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.clock = clock

    # ------------------------------------------------------------------
    # 상품
    # ------------------------------------------------------------------

    def _build_item(self, data: Dict[str, Any]) -> Item:
        """입력 검증 + Item 생성 (저장하지 않음)"""
        normalized = _normalize_input(data)
        item = Item.from_dict(normalized)

        if not item.name:
            raise ItemValidationError("상품명을 입력하세요", field="name")
        if not item.expiry_date:
            raise ItemValidationError("유통기한을 입력하세요", field="expiry_date")

        return Item(
            id=item.id or generate_item_id(),
            name=item.name,
            sku=item.sku,
            category=item.category,
            supplier=item.supplier,
            lot=item.lot,
            quantity=item.quantity,
            received_date=item.received_date or self.clock().isoformat(),
            expiry_date=item.expiry_date,
        )

    def upsert_item(self, data: Union[Item, Dict[str, Any]]) -> Item:
        """상품 등록/수정 (같은 id는 교체, 알림 재무장)

        Args:
            data: Item 또는 dict (name, expiry_date 필수, id 있으면 수정)

        Returns:
            저장된 Item

        Raises:
            ItemValidationError: 이름/유통기한 누락
            PersistenceError: 저장 실패 (메모리 변경은 유지)
        """
        if isinstance(data, Item):
            data = data.to_dict()
        item = self._build_item(data)

        with self.scheduler.exclusive():
            items = self.store.items
            exists = any(existing.id == item.id for existing in items)
            if exists:
                next_items = [item if existing.id == item.id else existing for existing in items]
            else:
                next_items = items + [item]
            next_state = arm(self.store.notification_state, item.id)

            try:
                self.store.put(items=next_items, state=next_state)
            finally:
                self.scheduler.run_now("upsert")

        logger.info(f"상품 {'수정' if exists else '등록'}: {item.name} (id={item.id}, 유통기한={item.expiry_date})")
        return item

    def delete_item(self, item_id: str) -> bool:
        """상품 삭제 (알림 상태도 제거)

        Returns:
            삭제 여부 (없는 id면 False, 변경 없음)
        """
        with self.scheduler.exclusive():
            items = self.store.items
            next_items = [item for item in items if item.id != item_id]
            if len(next_items) == len(items):
                logger.warning(f"삭제 대상 없음: id={item_id}")
                return False

            next_state = forget(self.store.notification_state, item_id)
            try:
                self.store.put(items=next_items, state=next_state)
            finally:
                self.scheduler.run_now("delete")

        logger.info(f"상품 삭제: id={item_id}")
        return True

    def get_item(self, item_id: str) -> Item:
        for item in self.store.items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(f"상품 없음: {item_id}")

    # ------------------------------------------------------------------
    # 설정
    # ------------------------------------------------------------------

    @property
    def settings(self) -> Settings:
        return self.store.settings

    def update_settings(
        self,
        soon_threshold_days: Optional[Any] = None,
        notify_soon_enabled: Optional[bool] = None,
        notify_expired_enabled: Optional[bool] = None,
    ) -> Settings:
        """설정 변경 (None은 기존값 유지, 기준 일수는 최소 1)"""
        with self.scheduler.exclusive():
            current = self.store.settings
            next_settings = Settings(
                soon_threshold_days=(
                    current.soon_threshold_days if soon_threshold_days is None
                    else to_threshold_days(soon_threshold_days)
                ),
                notify_soon_enabled=(
                    current.notify_soon_enabled if notify_soon_enabled is None
                    else bool(notify_soon_enabled)
                ),
                notify_expired_enabled=(
                    current.notify_expired_enabled if notify_expired_enabled is None
                    else bool(notify_expired_enabled)
                ),
            )
            try:
                self.store.put(settings=next_settings)
            finally:
                self.scheduler.run_now("settings")

        logger.info(f"설정 변경: {next_settings.to_dict()}")
        return next_settings

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def annotated_items(self, today: Optional[date] = None) -> List[AnnotatedItem]:
        """전체 상품 상태 계산 (저장 순서)"""
        settings = self.store.settings
        return annotate(self.store.items, today or self.clock(), settings.soon_threshold_days)

    def query_items(
        self,
        search: str = "",
        status: Union[StatusFilter, str, None] = StatusFilter.ALL,
        sort: Union[SortKey, str, None] = SortKey.MHD_ASC,
        today: Optional[date] = None,
    ) -> List[AnnotatedItem]:
        """필터/검색/정렬된 상품 목록"""
        return query(self.annotated_items(today), search, status, sort)

    # ------------------------------------------------------------------
    # 내보내기 / 가져오기
    # ------------------------------------------------------------------

    def export_data(self) -> Dict[str, Any]:
        """{"items": [...], "settings": {...}}"""
        return {
            "items": [item.to_dict() for item in self.store.items],
            "settings": self.store.settings.to_dict(),
        }

    def export_to_file(self, path: Optional[Path] = None) -> Path:
        """JSON 파일로 내보내기

        Args:
            path: 저장 경로 (없으면 data/mhd-tracker-export-YYYY-MM-DD.json)

        Returns:
            저장된 파일 경로
        """
        if path is None:
            path = DATA_DIR / f"{EXPORT_FILENAME_PREFIX}-{self.clock().isoformat()}.json"
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.export_data(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise PersistenceError(f"내보내기 실패: {path} ({e})") from e

        logger.info(f"내보내기 완료: {path}")
        return path

    def import_data(self, payload: Any) -> int:
        """가져오기 (상품/설정 전체 교체, 형식 오류 시 변경 없음)

        기존 id의 알림 상태는 유지하고, 사라진 id의 상태는 제거한다.

        Returns:
            가져온 상품 수

        Raises:
            ImportPayloadError: 형식 오류
            PersistenceError: 저장 실패 (메모리 변경은 유지)
        """
        items, settings = parse_import_payload(payload)

        with self.scheduler.exclusive():
            kept_ids = {item.id for item in items}
            next_state = {
                item_id: flags
                for item_id, flags in self.store.notification_state.items()
                if item_id in kept_ids
            }
            try:
                self.store.put(items=items, settings=settings, state=next_state)
            finally:
                self.scheduler.run_now("import")

        logger.info(f"가져오기 완료: items={len(items)}")
        return len(items)

    def import_from_file(self, path: Path) -> int:
        """JSON 파일에서 가져오기"""
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except OSError as e:
            raise ImportPayloadError(f"파일을 읽을 수 없습니다: {path} ({e})") from e
        except ValueError as e:
            raise ImportPayloadError(f"JSON 형식 오류: {path} ({e})") from e
        return self.import_data(payload)
