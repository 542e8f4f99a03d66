"""
MHD 트래커 로깅

로그는 <프로젝트>/logs 아래 세 파일로 나뉜다.
- mhd_tracker.log : 저장소, 스케줄러, 서비스, CLI
- alert.log       : 알림 판정/발송 (로거 이름에 notification 또는 alert 포함)
- error.log       : 모든 로거의 ERROR 이상

로그 레벨은 MHD_LOG_LEVEL 환경변수(기본 INFO)로 바꾼다.

Usage:
    from mhd_tracker.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("상품 등록")
"""

import logging
import os
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Set

LOG_DIR = Path(__file__).parent.parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_FORMAT_SIMPLE = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILES: Dict[str, Path] = {
    "main": LOG_DIR / "mhd_tracker.log",
    "alert": LOG_DIR / "alert.log",
    "error": LOG_DIR / "error.log",
}

# 로거 이름에 포함된 단어 → 로그 파일 키
_ALERT_MARKERS = ("notification", "alert")

# 파일 하나당 20MB, 백업 10개
_MAX_BYTES = 20 * 1024 * 1024
_BACKUP_COUNT = 10

# 잘라낸 로그에 남길 꼬리 크기
_TRUNCATE_KEEP_BYTES = 2 * 1024 * 1024

_configured: Set[str] = set()


def _default_level() -> int:
    name = os.getenv("MHD_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


class SafeRotatingFileHandler(RotatingFileHandler):
    """로테이션 중 파일이 잠겨 있으면 로테이션을 건너뛰고 기존 파일에 이어 쓴다"""

    def doRollover(self):
        try:
            super().doRollover()
        except PermissionError:
            if self.stream is None and not self.delay:
                self.stream = self._open()


def _file_handler(path: Path, level: int, max_bytes: int,
                  backup_count: int) -> Optional[logging.Handler]:
    try:
        handler = SafeRotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as e:
        print(f"[WARN] 로그 파일을 열 수 없습니다 ({path}): {e}")
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logger(
    name: str,
    level: Optional[int] = None,
    log_file: str = "main",
    console: bool = True,
    max_bytes: int = _MAX_BYTES,
    backup_count: int = _BACKUP_COUNT,
) -> logging.Logger:
    """이름별 로거를 한 번만 구성해서 돌려준다

    log_file 키("main" | "alert")의 파일, error.log, 콘솔(stdout)에 기록하며
    루트 로거로는 전파하지 않는다.
    """
    logger = logging.getLogger(name)
    if name in _configured or logger.handlers:
        _configured.add(name)
        return logger

    level = _default_level() if level is None else level
    logger.setLevel(level)

    targets = [
        (LOG_FILES.get(log_file, LOG_FILES["main"]), level),
        (LOG_FILES["error"], logging.ERROR),
    ]
    for path, handler_level in targets:
        handler = _file_handler(path, handler_level, max_bytes, backup_count)
        if handler is not None:
            logger.addHandler(handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE, DATE_FORMAT))
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

    logger.propagate = False
    _configured.add(name)
    return logger


def get_logger(name: str) -> logging.Logger:
    """모듈 로거 (알림 관련 모듈은 alert.log, 나머지는 mhd_tracker.log)"""
    if any(marker in name for marker in _ALERT_MARKERS):
        return setup_logger(name, log_file="alert")
    return setup_logger(name, log_file="main")


class LoggerMixin:
    """self.logger 를 제공하는 믹스인 (정의된 모듈 이름으로 get_logger)"""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__module__)
        return self._logger


def log_with_context(
    _logger: logging.Logger,
    level: str,
    msg: str,
    exc_info: bool = False,
    **ctx: Any,
) -> None:
    """메시지 뒤에 "| key=value" 를 붙여 기록 (값이 None인 키는 생략)

    Usage:
        log_with_context(logger, "info", "알림 발송", item_id="K3F9", kind="expired")
        # 알림 발송 | item_id=K3F9 | kind=expired
    """
    parts = [msg] + [f"{key}={value}" for key, value in ctx.items() if value is not None]
    log_fn = getattr(_logger, level, None) or _logger.info
    log_fn(" | ".join(parts), exc_info=exc_info)


def _is_rotated_backup(path: Path) -> bool:
    # mhd_tracker.log.3 처럼 숫자 확장자
    return bool(path.suffix) and path.suffix[1:].isdigit()


def cleanup_old_logs(max_age_days: int = 30, max_file_mb: int = 50,
                     log_dir: Optional[Path] = None) -> None:
    """스케줄러 시작 시 로그 디렉토리 정리

    - max_age_days 보다 오래된 백업(.log.N) 삭제
    - max_file_mb 를 넘은 .log 파일은 끝부분만 남기고 잘라냄
    """
    target_dir = log_dir or LOG_DIR
    if not target_dir.exists():
        return

    cutoff = datetime.now() - timedelta(days=max_age_days)
    size_limit = max_file_mb * 1024 * 1024

    for path in target_dir.iterdir():
        if not path.is_file():
            continue
        try:
            stat = path.stat()
            if _is_rotated_backup(path):
                if datetime.fromtimestamp(stat.st_mtime) < cutoff:
                    path.unlink()
            elif path.suffix == ".log" and stat.st_size > size_limit:
                _truncate_log_file(path, keep_bytes=_TRUNCATE_KEEP_BYTES)
        except OSError as e:
            # 다른 프로세스가 쓰는 중이면 다음 시작 때 정리
            print(f"[WARN] 로그 정리 건너뜀 ({path.name}): {e}")


def _truncate_log_file(file_path: Path, keep_bytes: int = _TRUNCATE_KEEP_BYTES) -> None:
    """마지막 keep_bytes 만 남김 (첫 줄은 잘린 줄이므로 버림)"""
    size = file_path.stat().st_size
    if size <= keep_bytes:
        return

    with open(file_path, "rb") as f:
        f.seek(size - keep_bytes)
        f.readline()
        tail = f.read()

    with open(file_path, "wb") as f:
        f.write(b"[LOG TRUNCATED - previous content removed]\n")
        f.write(tail)
