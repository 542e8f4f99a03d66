"""
트래커 조립 (Composition Root)

저장소 → 알림기 → 평가 플로우 → 스케줄러 → 서비스 순서로 생성하고,
시작 시 저장소 로드와 알림 권한 요청을 수행합니다.

Usage:
    app = create_tracker()
    app.start()            # 시작 직후 1회 평가 + 주기 평가 시작
    app.service.upsert_item({"name": "우유", "expiry_date": "2026-10-25"})
    app.stop()
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from mhd_tracker.application.scheduler.job_scheduler import ExpiryCheckScheduler
from mhd_tracker.application.services.tracker_service import TrackerService
from mhd_tracker.application.use_cases.expiry_alert_flow import ExpiryAlertFlow
from mhd_tracker.domain.notification_tracker import NotificationDedupTracker
from mhd_tracker.infrastructure.database.repos import KeyValueRepository
from mhd_tracker.infrastructure.database.tracker_store import TrackerStore
from mhd_tracker.notification import Notifier, PermissionState, create_notifier
from mhd_tracker.settings.app_config import CHECK_INTERVAL_SECONDS
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class TrackerApp:
    """조립된 트래커 구성요소"""
    store: TrackerStore
    notifier: Notifier
    tracker: NotificationDedupTracker
    flow: ExpiryAlertFlow
    scheduler: ExpiryCheckScheduler
    service: TrackerService

    def start(self, run_immediately: bool = True) -> None:
        """주기 평가 시작 (백그라운드)"""
        self.scheduler.start(run_immediately=run_immediately)

    def stop(self) -> None:
        self.scheduler.stop()

    def __enter__(self) -> "TrackerApp":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


def create_tracker(
    db_path: Optional[Path] = None,
    notifier: Optional[Notifier] = None,
    clock: Optional[Callable[[], date]] = None,
    interval_seconds: Optional[int] = None,
) -> TrackerApp:
    """트래커 생성 (저장소 로드 + 알림 권한 요청까지 수행, 스케줄러는 미시작)

    Args:
        db_path: SQLite 경로 (None이면 MHD_DB_PATH / data/mhd_tracker.db)
        notifier: 알림기 (None이면 MHD_NOTIFIER 설정으로 생성)
        clock: 오늘 날짜 함수 (테스트 주입용)
        interval_seconds: 주기 평가 간격 (None이면 MHD_CHECK_INTERVAL_SECONDS)
    """
    store = TrackerStore(KeyValueRepository(db_path=db_path))
    store.load()

    notifier = notifier or create_notifier()
    permission = notifier.request_permission()
    if permission != PermissionState.GRANTED:
        logger.warning(f"알림 권한 없음 ({permission.value}): 알림은 기록만 되고 전송되지 않습니다")

    clock = clock or date.today
    tracker = NotificationDedupTracker(notifier)
    flow = ExpiryAlertFlow(store, tracker, clock=clock)
    scheduler = ExpiryCheckScheduler(
        flow,
        interval_seconds=interval_seconds or CHECK_INTERVAL_SECONDS,
    )
    service = TrackerService(store, scheduler, clock=clock)

    logger.info(f"트래커 준비 완료: db={store.repo.db_path}, notifier={type(notifier).__name__}")
    return TrackerApp(
        store=store,
        notifier=notifier,
        tracker=tracker,
        flow=flow,
        scheduler=scheduler,
        service=service,
    )
