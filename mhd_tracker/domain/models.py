"""
도메인 값 객체 (Value Objects)

상품(Item), 설정(Settings), 알림 상태(AlertFlags)와
파생 값(DaysRemaining, AnnotatedItem)을 정의합니다.
I/O 의존성 없이 순수 데이터 구조만 포함합니다.

직렬화 키는 camelCase (receivedDate, expiryDate ...)이며,
이전 버전 키(received, mhd, soonDays ...)도 읽기 시 허용합니다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Union

from mhd_tracker.settings.constants import (
    DEFAULT_SOON_THRESHOLD_DAYS,
    DEFAULT_NOTIFY_SOON,
    DEFAULT_NOTIFY_EXPIRED,
    MIN_SOON_THRESHOLD_DAYS,
    DEFAULT_QUANTITY,
    STATUS_OK,
    STATUS_SOON,
    STATUS_EXPIRED,
    STATUS_LABELS,
)


class ItemStatus(Enum):
    """유통기한 상태"""
    OK = STATUS_OK
    SOON = STATUS_SOON          # 0 <= 남은 일수 <= 기준 일수
    EXPIRED = STATUS_EXPIRED    # 남은 일수 < 0

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.value]


class AlertKind(Enum):
    """알림 종류"""
    SOON = "soon"
    EXPIRED = "expired"


# =============================================================================
# 남은 일수: Finite(n) | Unbounded
# =============================================================================

@dataclass(frozen=True)
class Finite:
    """유통기한이 있는 상품의 남은 일수 (음수 = 경과)"""
    days: int

    def __str__(self) -> str:
        return str(self.days)


@dataclass(frozen=True)
class Unbounded:
    """유통기한 없음 (무기한)"""

    def __str__(self) -> str:
        return "-"


DaysRemaining = Union[Finite, Unbounded]
UNBOUNDED = Unbounded()


# =============================================================================
# 변환 헬퍼
# =============================================================================

def _clean_str(value: Any) -> str:
    """None/비문자열을 안전하게 trim된 문자열로 변환"""
    if value is None:
        return ""
    return str(value).strip()


def _optional_str(value: Any) -> Optional[str]:
    """빈 문자열은 None으로"""
    cleaned = _clean_str(value)
    return cleaned or None


def _to_int(value: Any) -> Optional[int]:
    """정수 변환 ("2.7" → 2, 무한대/NaN/문자열 → None)"""
    try:
        return int(value)
    except (ValueError, TypeError, OverflowError):
        pass
    try:
        return int(float(value))
    except (ValueError, TypeError, OverflowError):
        return None


def to_quantity(value: Any) -> int:
    """수량 변환 (1 미만 또는 변환 불가 → 1)"""
    qty = _to_int(value)
    if qty is None or qty < 1:
        return DEFAULT_QUANTITY
    return qty


def to_threshold_days(value: Any) -> int:
    """임박 기준 일수 변환 (최소 1, 변환 불가 → 1)"""
    days = _to_int(value)
    if days is None:
        return MIN_SOON_THRESHOLD_DAYS
    return max(MIN_SOON_THRESHOLD_DAYS, days)


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# =============================================================================
# 상품 / 설정 / 알림 상태
# =============================================================================

@dataclass(frozen=True)
class Item:
    """추적 대상 상품 (입고 배치 단위)"""
    id: str
    name: str
    sku: str = ""
    category: str = ""
    supplier: str = ""
    lot: str = ""
    quantity: int = DEFAULT_QUANTITY
    received_date: Optional[str] = None     # YYYY-MM-DD
    expiry_date: Optional[str] = None       # YYYY-MM-DD (MHD)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "category": self.category,
            "supplier": self.supplier,
            "lot": self.lot,
            "quantity": self.quantity,
            "receivedDate": self.received_date,
            "expiryDate": self.expiry_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        """저장/가져오기 데이터에서 복원 (이전 키 received/mhd 허용)"""
        received = data.get("receivedDate", data.get("received"))
        expiry = data.get("expiryDate", data.get("mhd"))
        return cls(
            id=_clean_str(data.get("id")),
            name=_clean_str(data.get("name")),
            sku=_clean_str(data.get("sku")),
            category=_clean_str(data.get("category")),
            supplier=_clean_str(data.get("supplier")),
            lot=_clean_str(data.get("lot")),
            quantity=to_quantity(data.get("quantity", DEFAULT_QUANTITY)),
            received_date=_optional_str(received),
            expiry_date=_optional_str(expiry),
        )


@dataclass(frozen=True)
class Settings:
    """프로세스 전역 설정"""
    soon_threshold_days: int = DEFAULT_SOON_THRESHOLD_DAYS
    notify_soon_enabled: bool = DEFAULT_NOTIFY_SOON
    notify_expired_enabled: bool = DEFAULT_NOTIFY_EXPIRED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "soonThresholdDays": self.soon_threshold_days,
            "notifySoonEnabled": self.notify_soon_enabled,
            "notifyExpiredEnabled": self.notify_expired_enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """설정 복원 (이전 키 soonDays/notifySoon/notifyExpired 허용)"""
        threshold = data.get("soonThresholdDays", data.get("soonDays"))
        return cls(
            soon_threshold_days=(
                DEFAULT_SOON_THRESHOLD_DAYS if threshold is None
                else to_threshold_days(threshold)
            ),
            notify_soon_enabled=_to_bool(
                data.get("notifySoonEnabled", data.get("notifySoon")),
                DEFAULT_NOTIFY_SOON,
            ),
            notify_expired_enabled=_to_bool(
                data.get("notifyExpiredEnabled", data.get("notifyExpired")),
                DEFAULT_NOTIFY_EXPIRED,
            ),
        )


@dataclass(frozen=True)
class AlertFlags:
    """상품별 알림 발송 여부 (upsert 시 둘 다 False로 재무장)"""
    soon_alerted: bool = False
    expired_alerted: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "soonAlerted": self.soon_alerted,
            "expiredAlerted": self.expired_alerted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlertFlags":
        """이전 형식 {"soon": true, "expired": true}도 허용"""
        return cls(
            soon_alerted=_to_bool(data.get("soonAlerted", data.get("soon")), False),
            expired_alerted=_to_bool(data.get("expiredAlerted", data.get("expired")), False),
        )


# 상품 ID → 알림 플래그
NotificationState = Dict[str, AlertFlags]


# =============================================================================
# 파생 값 (저장하지 않음)
# =============================================================================

@dataclass(frozen=True)
class AnnotatedItem:
    """상태가 계산된 상품 (조회 시마다 재계산)"""
    item: Item
    days_remaining: DaysRemaining = field(default=UNBOUNDED)
    status: ItemStatus = ItemStatus.OK

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def is_finite(self) -> bool:
        return isinstance(self.days_remaining, Finite)


@dataclass(frozen=True)
class Alert:
    """발송된 알림 1건"""
    item_id: str
    kind: AlertKind
    title: str
    body: str
