"""
스케줄러 실행기

- 시작 직후: 저장소 로드 + 유통기한 평가 1회
- 30초마다(MHD_CHECK_INTERVAL_SECONDS): 유통기한 평가 (임박/경과 알림)
- 중복 실행 방지 (락 파일)

Usage:
    python run_scheduler.py                  # 스케줄러 시작
    python run_scheduler.py --now            # 평가 1회 실행 후 종료
    python run_scheduler.py --interval 60    # 평가 간격 변경 (초)
"""

import argparse
import atexit
import os
import sys
from datetime import datetime

from mhd_tracker.application.bootstrap import create_tracker
from mhd_tracker.settings.app_config import LOCK_FILE
from mhd_tracker.utils.logger import cleanup_old_logs, get_logger

# 로그 정리 (30일 초과 삭제, 50MB 초과 잘라내기)
cleanup_old_logs(max_age_days=30, max_file_mb=50)

logger = get_logger(__name__)


def _is_pid_running(pid: int) -> bool:
    """PID가 실행 중인지 확인 (Windows/Unix 호환)"""
    if sys.platform == 'win32':
        import ctypes
        kernel32 = ctypes.windll.kernel32
        SYNCHRONIZE = 0x00100000
        handle = kernel32.OpenProcess(SYNCHRONIZE, False, pid)
        if handle:
            kernel32.CloseHandle(handle)
            return True
        return False
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def acquire_lock() -> bool:
    """락 파일 생성 (중복 실행 방지)"""
    try:
        LOCK_FILE.parent.mkdir(parents=True, exist_ok=True)

        if LOCK_FILE.exists():
            try:
                old_pid = int(LOCK_FILE.read_text().strip())
                if _is_pid_running(old_pid):
                    logger.error(f"스케줄러가 이미 실행 중입니다 (PID: {old_pid})")
                    return False
                logger.warning("오래된 락 파일 발견. 삭제합니다.")
                LOCK_FILE.unlink()
            except (ValueError, FileNotFoundError):
                LOCK_FILE.unlink(missing_ok=True)

        LOCK_FILE.write_text(str(os.getpid()))
        return True
    except OSError as e:
        logger.error(f"락 파일 생성 실패: {e}")
        return False


def release_lock() -> None:
    """락 파일 삭제 (자기 PID일 때만)"""
    try:
        if LOCK_FILE.exists() and LOCK_FILE.read_text().strip() == str(os.getpid()):
            LOCK_FILE.unlink()
            logger.info("락 파일 삭제됨")
    except OSError as e:
        logger.warning(f"락 파일 삭제 실패: {e}")


def run_scheduler(interval_seconds=None) -> None:
    """스케줄러 실행 (Ctrl+C까지 블록)"""
    if not acquire_lock():
        sys.exit(1)
    atexit.register(release_lock)

    app = create_tracker(interval_seconds=interval_seconds)

    logger.info("=" * 60)
    logger.info("MHD Tracker - Scheduler")
    logger.info(f"[Scheduler] Started at: {datetime.now().isoformat()}")
    logger.info(f"[Scheduler] PID: {os.getpid()}")
    logger.info(f"[Scheduler] Interval: {app.scheduler.interval_seconds}s")
    logger.info("[Scheduler] Press Ctrl+C to stop")
    logger.info("=" * 60)

    app.scheduler.run_forever(run_immediately=True)
    app.stop()


def run_now() -> int:
    """평가 1회 실행 (종료 코드 반환)"""
    app = create_tracker()
    result = app.scheduler.run_now("manual")
    logger.info(f"평가 1회 실행: checked={result.checked}, alerts={len(result.alerts)}")
    return 0 if result.success else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="MHD Tracker Scheduler")
    parser.add_argument(
        "--now", "-n",
        action="store_true",
        help="Run one evaluation immediately and exit",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Evaluation interval in seconds (default: MHD_CHECK_INTERVAL_SECONDS)",
    )
    args = parser.parse_args()

    try:
        if args.now:
            sys.exit(run_now())
        run_scheduler(args.interval)
    except KeyboardInterrupt:
        print("\n[Scheduler] Stopped by user")
        release_lock()
        sys.exit(0)
