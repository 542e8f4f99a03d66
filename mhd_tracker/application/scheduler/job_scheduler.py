"""
ExpiryCheckScheduler -- 유통기한 평가 스케줄러

평가 플로우(ExpiryAlertFlow)를 세 가지 시점에 실행합니다.
- 시작 직후 (저장소 로드 후) : start() / run_forever()
- 상품/설정 변경 직후        : run_now(reason)
- 주기 실행 (기본 30초)      : schedule 라이브러리 job

실행은 RLock으로 직렬화되며, 실행 도중 같은 스레드에서 들어온 재실행 요청은
중첩 실행하지 않고 현재 실행이 끝난 뒤 1회 이어서 실행합니다.
stop() 이후에는 주기 실행이 발생하지 않습니다.

Usage:
    scheduler = ExpiryCheckScheduler(flow, interval_seconds=30)
    scheduler.start()       # 백그라운드 스레드
    ...
    scheduler.stop()
"""

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

import schedule

from mhd_tracker.application.use_cases.expiry_alert_flow import EvaluationResult, ExpiryAlertFlow
from mhd_tracker.settings.app_config import CHECK_INTERVAL_SECONDS, SCHEDULER_POLL_SECONDS
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class ExpiryCheckScheduler:
    """유통기한 평가 스케줄러"""

    def __init__(
        self,
        flow: ExpiryAlertFlow,
        interval_seconds: int = CHECK_INTERVAL_SECONDS,
        poll_seconds: float = SCHEDULER_POLL_SECONDS,
    ) -> None:
        """초기화

        Args:
            flow: 평가 플로우
            interval_seconds: 주기 실행 간격 (초)
            poll_seconds: run_pending() 확인 간격 (초)
        """
        self.flow = flow
        self.interval_seconds = max(1, int(interval_seconds))
        self.poll_seconds = poll_seconds
        self.last_result: Optional[EvaluationResult] = None

        self._scheduler = schedule.Scheduler()
        self._job: Optional[schedule.Job] = None
        self._lock = threading.RLock()
        self._in_progress = False
        self._pending_reason: Optional[str] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # 실행
    # ------------------------------------------------------------------

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """평가 실행과 상호 배제 (상태 read-modify-write 구간에서 사용)"""
        with self._lock:
            yield

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def run_now(self, reason: str = "manual") -> Optional[EvaluationResult]:
        """즉시 평가 실행

        Args:
            reason: 실행 사유 (startup, tick, upsert, delete, settings, import ...)

        Returns:
            마지막 실행 결과. 실행 중 재진입 요청이면 None (현재 실행 후 이어서 실행됨)
        """
        with self._lock:
            if self._in_progress:
                logger.debug(f"평가 실행 중 재요청 (reason={reason}), 완료 후 재실행")
                self._pending_reason = reason
                return None

            self._in_progress = True
            try:
                result = self._run_flow(reason)
                while self._pending_reason is not None:
                    pending = self._pending_reason
                    self._pending_reason = None
                    result = self._run_flow(pending)
            finally:
                self._in_progress = False
            return result

    def _run_flow(self, reason: str) -> EvaluationResult:
        try:
            result = self.flow.run(reason=reason)
        except Exception as e:
            # 주기 실행 스레드가 죽지 않도록 결과에 기록
            logger.error(f"평가 실행 실패 (reason={reason}): {e}", exc_info=True)
            result = EvaluationResult(reason=reason, error=str(e))
        self.last_result = result
        return result

    def _tick(self) -> None:
        self.run_now("tick")

    # ------------------------------------------------------------------
    # 주기 실행 lifecycle
    # ------------------------------------------------------------------

    @property
    def jobs(self) -> List[schedule.Job]:
        return list(self._scheduler.jobs)

    @property
    def running(self) -> bool:
        return self._job is not None

    def _schedule_job(self) -> None:
        if self._job is None:
            self._job = self._scheduler.every(self.interval_seconds).seconds.do(self._tick)
            logger.info(f"[Scheduler] 주기 평가 등록: {self.interval_seconds}초 간격")

    def run_pending(self, force: bool = False) -> None:
        """예정된 job 실행 (force=True면 시간과 무관하게 즉시 실행)"""
        if force:
            self._scheduler.run_all(delay_seconds=0)
        else:
            self._scheduler.run_pending()

    def start(self, run_immediately: bool = True) -> None:
        """백그라운드 스레드로 주기 실행 시작

        Args:
            run_immediately: True면 시작 직후 1회 평가
        """
        if self._thread is not None and self._thread.is_alive():
            logger.warning("[Scheduler] 이미 실행 중")
            return

        if run_immediately:
            self.run_now("startup")

        self._stop_event.clear()
        self._schedule_job()
        self._thread = threading.Thread(
            target=self._loop, name="mhd-expiry-scheduler", daemon=True
        )
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop_event.wait(self.poll_seconds):
            self._scheduler.run_pending()

    def run_forever(self, run_immediately: bool = True) -> None:
        """현재 스레드에서 주기 실행 (stop() 또는 Ctrl+C까지 블록)"""
        if run_immediately:
            self.run_now("startup")

        self._stop_event.clear()
        self._schedule_job()
        next_run = self._scheduler.next_run
        logger.info(f"[Scheduler] 다음 평가: {next_run}")
        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("[Scheduler] 중지 요청 (Ctrl+C)")
        finally:
            self._cancel_job()

    def _cancel_job(self) -> None:
        self._scheduler.clear()
        self._job = None

    def stop(self, timeout: float = 5.0) -> None:
        """주기 실행 중지 (여러 번 호출해도 안전)"""
        self._stop_event.set()
        was_running = self._job is not None
        self._cancel_job()

        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

        if was_running:
            logger.info("[Scheduler] 주기 평가 중지")
