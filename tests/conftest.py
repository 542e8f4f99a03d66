"""
공유 테스트 픽스처

- tmp_path SQLite DB (테스트 간 격리)
- 고정 날짜 시계 (2026-10-19)
- 전송 내역을 기록하는 알림기
- 저장소 / 추적기 / 플로우 / 스케줄러 / 서비스 조립
"""

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# 프로젝트 루트를 sys.path에 추가
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mhd_tracker.application.scheduler.job_scheduler import ExpiryCheckScheduler
from mhd_tracker.application.services.tracker_service import TrackerService
from mhd_tracker.application.use_cases.expiry_alert_flow import ExpiryAlertFlow
from mhd_tracker.domain.models import Item
from mhd_tracker.domain.notification_tracker import NotificationDedupTracker
from mhd_tracker.infrastructure.database.repos import KeyValueRepository
from mhd_tracker.infrastructure.database.tracker_store import TrackerStore
from mhd_tracker.notification.base import Notifier, PermissionState

TODAY = date(2026, 10, 19)


def days_from_today(n: int) -> str:
    """기준일 + n일 (YYYY-MM-DD)"""
    return (TODAY + timedelta(days=n)).isoformat()


def make_item(item_id: str, name: str, expiry_offset=None, **kwargs) -> Item:
    """테스트 상품 생성 (expiry_offset: 기준일 대비 일수, None이면 유통기한 없음)"""
    expiry = days_from_today(expiry_offset) if expiry_offset is not None else None
    return Item(id=item_id, name=name, expiry_date=expiry, **kwargs)


class RecordingNotifier(Notifier):
    """emit 내역을 기록하는 테스트 알림기"""

    def __init__(self, permission: PermissionState = PermissionState.GRANTED) -> None:
        super().__init__()
        self._granted_state = permission
        self.sent = []

    def _resolve_permission(self) -> PermissionState:
        return self._granted_state

    def _deliver(self, title: str, body: str) -> None:
        self.sent.append((title, body))


class FailingRepository:
    """쓰기가 항상 실패하는 key-value 저장소"""

    def __init__(self, initial=None) -> None:
        self.data = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        raise OSError("disk full")


class MemoryRepository:
    """메모리 key-value 저장소"""

    def __init__(self, initial=None) -> None:
        self.data = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


@pytest.fixture
def test_db(tmp_path):
    """테스트용 격리 DB 파일 경로"""
    return tmp_path / "test_mhd.db"


@pytest.fixture
def clock():
    """고정 날짜 시계"""
    return lambda: TODAY


@pytest.fixture
def notifier():
    """권한이 허용된 기록용 알림기"""
    recorder = RecordingNotifier()
    recorder.request_permission()
    return recorder


@pytest.fixture
def store(test_db):
    """SQLite 기반 저장 어댑터 (로드 완료)"""
    tracker_store = TrackerStore(KeyValueRepository(db_path=test_db))
    tracker_store.load()
    return tracker_store


@pytest.fixture
def tracker(notifier):
    return NotificationDedupTracker(notifier)


@pytest.fixture
def flow(store, tracker, clock):
    return ExpiryAlertFlow(store, tracker, clock=clock)


@pytest.fixture
def scheduler(flow):
    sched = ExpiryCheckScheduler(flow, interval_seconds=30, poll_seconds=0.01)
    yield sched
    sched.stop()


@pytest.fixture
def service(store, scheduler, clock):
    return TrackerService(store, scheduler, clock=clock)
