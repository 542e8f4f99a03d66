"""
application/bootstrap.py 테스트

- 재시작 후 저장된 상태 복원 (이미 보낸 알림은 재발송 없음)
- 시작 직후 1회 평가
"""

import pytest

from mhd_tracker.application.bootstrap import create_tracker
from mhd_tracker.notification.base import PermissionState
from tests.conftest import RecordingNotifier, days_from_today


class TestCreateTracker:
    """조립 / 재시작"""

    @pytest.mark.db
    def test_requests_permission(self, test_db, clock):
        notifier = RecordingNotifier()
        app = create_tracker(db_path=test_db, notifier=notifier, clock=clock)
        assert app.notifier.permission == PermissionState.GRANTED
        assert app.scheduler.running is False

    @pytest.mark.db
    def test_restart_does_not_repeat_alerts(self, test_db, clock):
        first_notifier = RecordingNotifier()
        with create_tracker(db_path=test_db, notifier=first_notifier, clock=clock) as app:
            app.service.upsert_item({"name": "우유", "expiry_date": days_from_today(-1)})
        assert len(first_notifier.sent) == 1

        second_notifier = RecordingNotifier()
        app2 = create_tracker(db_path=test_db, notifier=second_notifier, clock=clock, interval_seconds=60)
        try:
            app2.start()
            assert app2.scheduler.last_result.reason == "startup"
            assert app2.scheduler.interval_seconds == 60
            assert len(app2.store.items) == 1
            assert second_notifier.sent == []
        finally:
            app2.stop()

    @pytest.mark.db
    def test_startup_evaluates_pending_items(self, test_db, clock):
        with create_tracker(db_path=test_db, notifier=RecordingNotifier(PermissionState.DENIED), clock=clock) as app:
            app.service.upsert_item({"name": "빵", "expiry_date": days_from_today(2)})

        notifier = RecordingNotifier()
        app2 = create_tracker(db_path=test_db, notifier=notifier, clock=clock)
        try:
            app2.start()
            # 권한 없이 처리된 알림도 플래그가 설정되어 재발송하지 않음
            assert notifier.sent == []
        finally:
            app2.stop()
