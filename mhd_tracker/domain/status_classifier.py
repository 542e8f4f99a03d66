"""
StatusClassifier -- 유통기한 상태 판정 순수 로직

상품 + 기준일 + 임박 기준 일수 → (남은 일수, 상태)
I/O 의존성 없음. 잘못된 날짜는 "유통기한 없음"으로 취급합니다.

Usage:
    from mhd_tracker.domain.status_classifier import classify, annotate

    days, status = classify(item, date.today(), 7)
    annotated = annotate(items, date.today(), settings.soon_threshold_days)
"""

from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple, Union

from mhd_tracker.domain.models import (
    AnnotatedItem,
    DaysRemaining,
    Finite,
    Item,
    ItemStatus,
    UNBOUNDED,
)

DateLike = Union[str, date, datetime, None]

# 허용하는 날짜 형식 (시간은 무시)
_DATE_FORMATS = (
    '%Y-%m-%d',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M',
)


def parse_date(value: DateLike) -> Optional[date]:
    """날짜 파싱 (자정 기준 date로 정규화, 실패 시 None)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except (ValueError, TypeError):
            continue
    return None


def whole_calendar_days(today: DateLike, target: DateLike) -> Optional[int]:
    """두 날짜 사이의 달력 일수 (target - today, 시간 무시)

    Returns:
        정수 일수 (같은 날 = 0), 파싱 불가 시 None
    """
    start = parse_date(today)
    end = parse_date(target)
    if start is None or end is None:
        return None
    return (end - start).days


def classify(item: Item, today: DateLike, soon_threshold_days: int) -> Tuple[DaysRemaining, ItemStatus]:
    """상품 상태 판정

    Args:
        item: 상품
        today: 기준일
        soon_threshold_days: 임박 기준 일수

    Returns:
        (남은 일수, 상태)
        - 유통기한 없음/잘못된 날짜 → (Unbounded, OK)
        - 남은 일수 < 0 → EXPIRED
        - 0 <= 남은 일수 <= 기준 → SOON
    """
    days = whole_calendar_days(today, item.expiry_date)
    if days is None:
        return UNBOUNDED, ItemStatus.OK

    if days < 0:
        status = ItemStatus.EXPIRED
    elif days <= soon_threshold_days:
        status = ItemStatus.SOON
    else:
        status = ItemStatus.OK
    return Finite(days), status


def annotate(items: Iterable[Item], today: DateLike, soon_threshold_days: int) -> List[AnnotatedItem]:
    """상품 목록 전체에 상태 부여 (입력 순서 유지)"""
    result = []
    for item in items:
        days, status = classify(item, today, soon_threshold_days)
        result.append(AnnotatedItem(item=item, days_remaining=days, status=status))
    return result
