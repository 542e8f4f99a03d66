"""
application/scheduler/job_scheduler.py + use_cases/expiry_alert_flow.py 테스트

- run_now: 즉시 평가, 결과 기록
- 실행 중 재요청: 중첩 실행 없이 완료 후 1회 재실행
- 플로우 예외: 스레드가 죽지 않고 error 결과
- start/stop: 주기 job 등록/해제, stop 이후 실행 없음
"""

import time

import pytest

from mhd_tracker.application.scheduler.job_scheduler import ExpiryCheckScheduler
from mhd_tracker.application.use_cases.expiry_alert_flow import EvaluationResult, ExpiryAlertFlow
from mhd_tracker.domain.notification_tracker import NotificationDedupTracker
from mhd_tracker.notification.base import PermissionState
from tests.conftest import RecordingNotifier, make_item


class ReentrantNotifier(RecordingNotifier):
    """전송 중에 스케줄러 평가를 다시 요청하는 알림기"""

    def __init__(self) -> None:
        super().__init__(PermissionState.GRANTED)
        self.scheduler = None
        self.reentrant_results = []

    def _deliver(self, title, body):
        super()._deliver(title, body)
        self.reentrant_results.append(self.scheduler.run_now("reentrant"))


class CountingFlow:
    """실행 횟수만 세는 플로우"""

    def __init__(self, fail: bool = False) -> None:
        self.reasons = []
        self.fail = fail

    def run(self, reason="manual"):
        self.reasons.append(reason)
        if self.fail:
            raise RuntimeError("boom")
        return EvaluationResult(reason=reason)


class TestExpiryAlertFlow:
    """평가 플로우"""

    @pytest.mark.db
    def test_run_counts_statuses(self, store, flow):
        store.put_items([make_item("A", "a", -1), make_item("B", "b", 2), make_item("C", "c", None)])
        result = flow.run(reason="manual")

        assert result.success
        assert result.checked == 3
        assert result.status_counts == {"ok": 1, "soon": 1, "expired": 1}
        assert len(result.alerts) == 2
        assert result.state_changed is True

    @pytest.mark.db
    def test_state_persisted_before_delivery(self, store, flow, notifier):
        store.put_items([make_item("A", "a", -1)])
        seen = []
        original = notifier._deliver

        def spy(title, body):
            seen.append(store.notification_state.get("A"))
            original(title, body)

        notifier._deliver = spy
        flow.run()
        assert seen[0].expired_alerted is True

    @pytest.mark.db
    def test_no_change_when_nothing_due(self, store, flow):
        store.put_items([make_item("A", "a", 30)])
        result = flow.run(reason="tick")
        assert result.alerts == []
        assert result.state_changed is False


class TestRunNow:
    """즉시 실행 / 재진입"""

    @pytest.mark.unit
    def test_run_now_records_last_result(self):
        scheduler = ExpiryCheckScheduler(CountingFlow())
        result = scheduler.run_now("upsert")
        assert result.reason == "upsert"
        assert scheduler.last_result is result
        assert scheduler.in_progress is False

    @pytest.mark.db
    def test_reentrant_request_reruns_after_current(self, store, clock):
        notifier = ReentrantNotifier()
        notifier.request_permission()
        flow = ExpiryAlertFlow(store, NotificationDedupTracker(notifier), clock=clock)
        scheduler = ExpiryCheckScheduler(flow)
        notifier.scheduler = scheduler

        store.put_items([make_item("A", "a", -1)])
        result = scheduler.run_now("upsert")

        assert notifier.reentrant_results == [None]
        assert len(notifier.sent) == 1
        assert result.reason == "reentrant"
        assert result.alerts == []

    @pytest.mark.unit
    def test_flow_exception_becomes_error_result(self):
        scheduler = ExpiryCheckScheduler(CountingFlow(fail=True))
        result = scheduler.run_now("tick")
        assert result.success is False
        assert "boom" in result.error

    @pytest.mark.unit
    def test_exclusive_is_reentrant(self):
        scheduler = ExpiryCheckScheduler(CountingFlow())
        with scheduler.exclusive():
            result = scheduler.run_now("upsert")
        assert result.reason == "upsert"


class TestLifecycle:
    """주기 실행 lifecycle"""

    @pytest.mark.unit
    def test_interval_minimum_one_second(self):
        assert ExpiryCheckScheduler(CountingFlow(), interval_seconds=0).interval_seconds == 1

    @pytest.mark.unit
    def test_start_runs_immediately_and_registers_job(self):
        flow = CountingFlow()
        scheduler = ExpiryCheckScheduler(flow, interval_seconds=30, poll_seconds=0.01)
        try:
            scheduler.start()
            assert flow.reasons == ["startup"]
            assert scheduler.running is True
            assert len(scheduler.jobs) == 1
        finally:
            scheduler.stop()

    @pytest.mark.unit
    def test_run_pending_force_runs_tick(self):
        flow = CountingFlow()
        scheduler = ExpiryCheckScheduler(flow, interval_seconds=30, poll_seconds=0.01)
        try:
            scheduler.start(run_immediately=False)
            scheduler.run_pending(force=True)
            assert "tick" in flow.reasons
        finally:
            scheduler.stop()

    @pytest.mark.unit
    def test_stop_clears_jobs_and_is_idempotent(self):
        flow = CountingFlow()
        scheduler = ExpiryCheckScheduler(flow, interval_seconds=1, poll_seconds=0.01)
        scheduler.start(run_immediately=False)
        scheduler.stop()
        scheduler.stop()

        assert scheduler.running is False
        assert scheduler.jobs == []
        count = len(flow.reasons)
        time.sleep(0.05)
        scheduler.run_pending(force=True)
        assert len(flow.reasons) == count

    @pytest.mark.unit
    def test_background_thread_fires_periodic_tick(self):
        flow = CountingFlow()
        scheduler = ExpiryCheckScheduler(flow, interval_seconds=1, poll_seconds=0.01)
        try:
            scheduler.start(run_immediately=False)
            deadline = time.time() + 3
            while "tick" not in flow.reasons and time.time() < deadline:
                time.sleep(0.05)
            assert "tick" in flow.reasons
        finally:
            scheduler.stop()
