"""
알림 전송 인터페이스

권한(permission) 확인 후에만 실제 전송하며,
권한이 없으면 emit()은 아무것도 하지 않는다 (에러 아님).
"""

from abc import ABC, abstractmethod
from enum import Enum

from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class PermissionState(Enum):
    """알림 권한 상태"""
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"     # 아직 요청하지 않음


class Notifier(ABC):
    """알림 전송기 기반 클래스

    Usage:
        notifier = LogNotifier()
        notifier.request_permission()
        notifier.emit("유통기한 경과", "우유 (유통기한 2026-10-18) 유통기한이 지났습니다.")
    """

    def __init__(self) -> None:
        self.permission = PermissionState.DEFAULT

    def request_permission(self) -> PermissionState:
        """권한 요청 (최초 1회만 판정, 이후 캐시된 값 반환)"""
        if self.permission == PermissionState.DEFAULT:
            self.permission = self._resolve_permission()
        return self.permission

    @property
    def granted(self) -> bool:
        return self.permission == PermissionState.GRANTED

    def emit(self, title: str, body: str) -> None:
        """알림 전송 (권한 없으면 no-op)"""
        if not self.granted:
            logger.debug(f"알림 권한 없음 ({self.permission.value}), 전송 생략: {title}")
            return
        self._deliver(title, body)

    @abstractmethod
    def _resolve_permission(self) -> PermissionState:
        """구현체별 권한 판정"""
        pass

    @abstractmethod
    def _deliver(self, title: str, body: str) -> None:
        """실제 전송 (예외를 밖으로 던지지 않는다)"""
        pass


class NullNotifier(Notifier):
    """아무것도 하지 않는 알림기 (테스트/알림 비활성화용)"""

    def _resolve_permission(self) -> PermissionState:
        return PermissionState.DENIED

    def _deliver(self, title: str, body: str) -> None:
        pass


class LogNotifier(Notifier):
    """알림을 alert.log에 기록하는 알림기 (기본값)"""

    def _resolve_permission(self) -> PermissionState:
        return PermissionState.GRANTED

    def _deliver(self, title: str, body: str) -> None:
        logger.info(f"[{title}] {body}")
