"""
통합 설정 진입점

경로, 환경변수(.env), 스케줄러/알림 설정을 한 곳에서 관리한다.

Usage:
    from mhd_tracker.settings.app_config import DB_PATH, CHECK_INTERVAL_SECONDS
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ── 프로젝트 경로 ──
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# ── 환경변수 로드 ──
load_dotenv(PROJECT_ROOT / ".env")


def _env_int(key: str, default: int) -> int:
    """정수 환경변수 조회 (잘못된 값이면 기본값)"""
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ── 저장소 ──
DB_PATH = Path(os.getenv("MHD_DB_PATH", str(DATA_DIR / "mhd_tracker.db")))

# ── 스케줄러 ──
CHECK_INTERVAL_SECONDS = max(1, _env_int("MHD_CHECK_INTERVAL_SECONDS", 30))
SCHEDULER_POLL_SECONDS = 1.0      # run_pending() 확인 간격 (초)
LOCK_FILE = DATA_DIR / "scheduler.lock"

# ── 알림 ──
NOTIFIER_KIND = os.getenv("MHD_NOTIFIER", "log").strip().lower()  # log | webhook | none
WEBHOOK_URL = os.getenv("MHD_WEBHOOK_URL", "")
WEBHOOK_TIMEOUT = max(1, _env_int("MHD_WEBHOOK_TIMEOUT", 10))
