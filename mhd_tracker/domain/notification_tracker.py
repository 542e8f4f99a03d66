"""
NotificationDedupTracker -- 알림 중복 방지

상품별로 "임박" 알림과 "경과" 알림을 무장(arming) 주기당 최대 1회만 발송합니다.
- upsert(등록/수정) → arm(): 두 플래그 모두 False로 재무장
- 삭제 → forget(): 상태 항목 제거 (알림 없음)
- check(): 발송 대상 결정 + 알림 전송 + 새 상태 반환 (입력 상태는 변경하지 않음)

상태가 OK로 돌아갔다가 다시 임박/경과가 되어도 플래그가 True인 동안은
재발송하지 않습니다. 재무장은 upsert만 가능합니다.

Usage:
    tracker = NotificationDedupTracker(notifier)
    alerts, next_state = tracker.check(annotated, settings, state)
"""

from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from mhd_tracker.domain.models import (
    Alert,
    AlertFlags,
    AlertKind,
    AnnotatedItem,
    Finite,
    ItemStatus,
    NotificationState,
    Settings,
)
from mhd_tracker.notification.base import Notifier, NullNotifier
from mhd_tracker.settings.constants import (
    ALERT_TITLE_EXPIRED,
    ALERT_TITLE_SOON,
    ALERT_BODY_EXPIRED,
    ALERT_BODY_SOON,
)
from mhd_tracker.utils.logger import get_logger, log_with_context

logger = get_logger(__name__)


def arm(state: NotificationState, item_id: str) -> NotificationState:
    """상품 알림 재무장 (새 상태 반환)"""
    next_state = dict(state)
    next_state[item_id] = AlertFlags()
    return next_state


def forget(state: NotificationState, item_id: str) -> NotificationState:
    """상품 알림 상태 제거 (새 상태 반환)"""
    next_state = dict(state)
    next_state.pop(item_id, None)
    return next_state


def _build_alert(entry: AnnotatedItem, kind: AlertKind) -> Alert:
    """알림 문구 생성"""
    expiry = entry.item.expiry_date or ""
    if kind == AlertKind.EXPIRED:
        title = ALERT_TITLE_EXPIRED
        body = ALERT_BODY_EXPIRED.format(name=entry.name, expiry=expiry)
    else:
        title = ALERT_TITLE_SOON
        days = entry.days_remaining.days if isinstance(entry.days_remaining, Finite) else ""
        body = ALERT_BODY_SOON.format(name=entry.name, days=days, expiry=expiry)
    return Alert(item_id=entry.id, kind=kind, title=title, body=body)


def plan_alerts(
    annotated_items: Iterable[AnnotatedItem],
    settings: Settings,
    state: NotificationState,
) -> Tuple[List[Alert], NotificationState]:
    """발송할 알림과 갱신될 상태를 계산 (부수효과 없음)

    상품당 1회 check에서 최대 1건: 경과가 임박보다 우선.
    """
    alerts: List[Alert] = []
    next_state = dict(state)

    for entry in annotated_items:
        if not isinstance(entry.days_remaining, Finite):
            continue

        flags = next_state.get(entry.id, AlertFlags())

        if (entry.status == ItemStatus.EXPIRED
                and settings.notify_expired_enabled
                and not flags.expired_alerted):
            alerts.append(_build_alert(entry, AlertKind.EXPIRED))
            next_state[entry.id] = replace(flags, expired_alerted=True)
        elif (entry.status == ItemStatus.SOON
                and settings.notify_soon_enabled
                and not flags.soon_alerted):
            alerts.append(_build_alert(entry, AlertKind.SOON))
            next_state[entry.id] = replace(flags, soon_alerted=True)

    return alerts, next_state


class NotificationDedupTracker:
    """알림 중복 방지 추적기

    알림 전송 수단(Notifier)은 주입받는다. 권한이 없는 Notifier는
    전송을 생략하지만 플래그는 그대로 설정된다 (발송 결정 기준).
    """

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self.notifier = notifier or NullNotifier()

    def plan(
        self,
        annotated_items: Iterable[AnnotatedItem],
        settings: Settings,
        state: NotificationState,
    ) -> Tuple[List[Alert], NotificationState]:
        """발송 대상 판정만 수행 (전송 없음)"""
        return plan_alerts(annotated_items, settings, state)

    def deliver(self, alerts: Iterable[Alert]) -> None:
        """판정된 알림 전송"""
        for alert in alerts:
            log_with_context(logger, "info", "알림 발송",
                             item_id=alert.item_id, kind=alert.kind.value)
            self.notifier.emit(alert.title, alert.body)

    def check(
        self,
        annotated_items: Iterable[AnnotatedItem],
        settings: Settings,
        state: NotificationState,
    ) -> Tuple[List[Alert], NotificationState]:
        """알림 대상 판정 및 전송

        Args:
            annotated_items: 상태가 계산된 상품 목록
            settings: 알림 on/off 설정
            state: 현재 알림 상태 (변경하지 않음)

        Returns:
            (발송한 알림 목록, 갱신된 알림 상태)
        """
        alerts, next_state = self.plan(annotated_items, settings, state)
        self.deliver(alerts)
        return alerts, next_state
