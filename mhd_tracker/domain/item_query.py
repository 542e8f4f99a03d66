"""
ItemQuery -- 상품 목록 필터링/검색/정렬 순수 로직

I/O 의존성 없이 AnnotatedItem 목록만으로 조회 결과를 만듭니다.
입력 목록은 변경하지 않고 항상 새 리스트를 반환합니다.

포함 로직:
- 상태 필터 (filter_by_status)
- 텍스트 검색 (filter_by_search)
- 정렬 (sort_items)
- 통합 조회 (query)

정렬 규칙:
- name*: 악센트를 제거한 이름 비교 (로케일 collation 적용, Ä는 A 옆)
- mhd*: 유통기한 날짜 비교, 유통기한 없음/잘못된 날짜는 항상 맨 뒤
- days*: 남은 일수 비교, 무기한(Unbounded)은 오름차순 맨 뒤 / 내림차순 맨 앞
- 같은 키는 입력 순서 유지 (stable)

Usage:
    from mhd_tracker.domain.item_query import query, StatusFilter, SortKey

    view = query(annotated, "milk", StatusFilter.SOON, SortKey.DAYS_ASC)
"""

import locale
import unicodedata
from enum import Enum
from typing import Iterable, List, Sequence, Tuple, Union

from mhd_tracker.domain.models import AnnotatedItem, Finite, ItemStatus
from mhd_tracker.domain.status_classifier import parse_date
from mhd_tracker.settings.constants import (
    SEARCH_FIELDS,
    STATUS_FILTER_ALL,
    SORT_NAME_ASC,
    SORT_NAME_DESC,
    SORT_MHD_ASC,
    SORT_MHD_DESC,
    SORT_DAYS_ASC,
    SORT_DAYS_DESC,
)


class StatusFilter(Enum):
    """상태 필터"""
    ALL = STATUS_FILTER_ALL
    OK = ItemStatus.OK.value
    SOON = ItemStatus.SOON.value
    EXPIRED = ItemStatus.EXPIRED.value

    def matches(self, status: ItemStatus) -> bool:
        return self is StatusFilter.ALL or self.value == status.value

    @classmethod
    def parse(cls, value: Union[str, "StatusFilter", ItemStatus, None]) -> "StatusFilter":
        """문자열/ItemStatus → StatusFilter (None → ALL, 알 수 없는 값 → ValueError)"""
        if value is None:
            return cls.ALL
        if isinstance(value, cls):
            return value
        if isinstance(value, ItemStatus):
            return cls(value.value)
        return cls(str(value).strip().lower())


class SortKey(Enum):
    """정렬 기준"""
    NAME_ASC = SORT_NAME_ASC
    NAME_DESC = SORT_NAME_DESC
    MHD_ASC = SORT_MHD_ASC
    MHD_DESC = SORT_MHD_DESC
    DAYS_ASC = SORT_DAYS_ASC
    DAYS_DESC = SORT_DAYS_DESC

    @property
    def descending(self) -> bool:
        return self.value.endswith("Desc")

    @classmethod
    def parse(cls, value: Union[str, "SortKey", None]) -> "SortKey":
        """문자열 → SortKey (None → MHD_ASC, 알 수 없는 값 → ValueError)"""
        if value is None:
            return cls.MHD_ASC
        if isinstance(value, cls):
            return value
        return cls(str(value).strip())


def filter_by_status(items: Iterable[AnnotatedItem], status_filter: StatusFilter) -> List[AnnotatedItem]:
    """상태 필터 적용"""
    return [entry for entry in items if status_filter.matches(entry.status)]


def _matches_search(entry: AnnotatedItem, needle: str) -> bool:
    for field_name in SEARCH_FIELDS:
        value = getattr(entry.item, field_name, None)
        if value and needle in value.lower():
            return True
    return False


def filter_by_search(items: Iterable[AnnotatedItem], search_text: str) -> List[AnnotatedItem]:
    """이름/SKU/카테고리/공급처/LOT 부분 일치 검색 (대소문자 무시)"""
    needle = (search_text or "").strip().lower()
    if not needle:
        return list(items)
    return [entry for entry in items if _matches_search(entry, needle)]


def _fold_accents(text: str) -> str:
    """악센트/움라우트 제거 후 casefold ("Äpfel" → "apfel")"""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _name_key(entry: AnnotatedItem) -> Tuple[str, str]:
    # 기본 문자 기준 비교, 같으면 원래 철자로 구분
    return (locale.strxfrm(_fold_accents(entry.name)), entry.name.casefold())


def _days_key(entry: AnnotatedItem) -> Tuple[int, int]:
    # 무기한은 (1, 0): 오름차순 맨 뒤, reverse 시 맨 앞
    if isinstance(entry.days_remaining, Finite):
        return (0, entry.days_remaining.days)
    return (1, 0)


def _sort_by_expiry(items: Sequence[AnnotatedItem], descending: bool) -> List[AnnotatedItem]:
    """유통기한 정렬 (날짜 없는 상품은 방향과 무관하게 맨 뒤, 입력 순서 유지)"""
    dated = []
    undated = []
    for entry in items:
        expiry = parse_date(entry.item.expiry_date)
        if expiry is None:
            undated.append(entry)
        else:
            dated.append((expiry, entry))
    dated.sort(key=lambda pair: pair[0], reverse=descending)
    return [entry for _, entry in dated] + undated


def sort_items(items: Iterable[AnnotatedItem], sort_key: SortKey) -> List[AnnotatedItem]:
    """정렬 (stable, 새 리스트 반환)"""
    entries = list(items)
    if sort_key in (SortKey.NAME_ASC, SortKey.NAME_DESC):
        return sorted(entries, key=_name_key, reverse=sort_key.descending)
    if sort_key in (SortKey.MHD_ASC, SortKey.MHD_DESC):
        return _sort_by_expiry(entries, sort_key.descending)
    return sorted(entries, key=_days_key, reverse=sort_key.descending)


def query(
    annotated_items: Iterable[AnnotatedItem],
    search_text: str = "",
    status_filter: Union[StatusFilter, str, None] = StatusFilter.ALL,
    sort_key: Union[SortKey, str, None] = SortKey.MHD_ASC,
) -> List[AnnotatedItem]:
    """통합 조회: 상태 필터 → 검색 → 정렬

    Args:
        annotated_items: 상태가 계산된 상품 목록
        search_text: 검색어 (빈 값이면 검색 생략)
        status_filter: 상태 필터 (문자열 "all"/"ok"/"soon"/"expired" 허용)
        sort_key: 정렬 기준 (문자열 "nameAsc" 등 허용)

    Returns:
        조회 결과 (새 리스트)
    """
    status_filter = StatusFilter.parse(status_filter)
    sort_key = SortKey.parse(sort_key)

    result = filter_by_status(annotated_items, status_filter)
    result = filter_by_search(result, search_text)
    return sort_items(result, sort_key)
