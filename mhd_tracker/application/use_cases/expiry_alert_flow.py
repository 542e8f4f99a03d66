"""
ExpiryAlertFlow -- 유통기한 평가 플로우

1회 실행 = 상태 판정(전체 상품) → 알림 중복 판정 → 알림 상태 저장 → 알림 전송.
스케줄러의 모든 트리거(시작, 변경 직후, 주기 실행)가 이 플로우를 호출합니다.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional

from mhd_tracker.domain.models import Alert, ItemStatus
from mhd_tracker.domain.notification_tracker import NotificationDedupTracker
from mhd_tracker.domain.status_classifier import annotate
from mhd_tracker.errors import PersistenceError
from mhd_tracker.infrastructure.database.tracker_store import TrackerStore
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EvaluationResult:
    """평가 1회 실행 결과"""
    reason: str = ""
    today: Optional[date] = None
    checked: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    alerts: List[Alert] = field(default_factory=list)
    state_changed: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class ExpiryAlertFlow:
    """유통기한 평가 플로우

    Usage:
        flow = ExpiryAlertFlow(store, tracker)
        result = flow.run(reason="tick")
    """

    def __init__(
        self,
        store: TrackerStore,
        tracker: NotificationDedupTracker,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.tracker = tracker
        self.clock = clock

    def run(self, reason: str = "manual") -> EvaluationResult:
        """평가 실행

        Args:
            reason: 실행 사유 (로깅용: startup, tick, upsert ...)

        Returns:
            EvaluationResult (저장 실패 시 error 설정, 메모리 상태는 유지)
        """
        today = self.clock()
        result = EvaluationResult(reason=reason, today=today)

        items, settings, state = self.store.snapshot()
        annotated = annotate(items, today, settings.soon_threshold_days)
        result.checked = len(annotated)
        result.status_counts = {
            status.value: sum(1 for entry in annotated if entry.status == status)
            for status in ItemStatus
        }

        alerts, next_state = self.tracker.plan(annotated, settings, state)
        result.alerts = alerts
        result.state_changed = next_state != state

        # 상태를 먼저 기록한 뒤 전송 (전송 중 변경이 생겨도 플래그가 덮어써지지 않음)
        if result.state_changed:
            try:
                self.store.put_notification_state(next_state)
            except PersistenceError as e:
                logger.error(f"알림 상태 저장 실패 (reason={reason}): {e}")
                result.error = str(e)
        self.tracker.deliver(alerts)

        # 주기 실행은 알림이 없으면 debug로만 기록
        log_fn = logger.debug if reason == "tick" and not alerts else logger.info
        log_fn(
            f"평가 완료: reason={reason}, checked={result.checked},"
            f" expired={result.status_counts.get(ItemStatus.EXPIRED.value, 0)},"
            f" soon={result.status_counts.get(ItemStatus.SOON.value, 0)},"
            f" alerts={len(alerts)}"
        )
        return result
