"""
알림 모듈
- 권한 기반 알림 인터페이스 (Notifier)
- 로그 / 웹훅 / 무동작 구현체
"""

from typing import Optional

from .base import Notifier, NullNotifier, LogNotifier, PermissionState
from .webhook_notifier import WebhookNotifier


def create_notifier(kind: Optional[str] = None, webhook_url: Optional[str] = None,
                    timeout: Optional[int] = None) -> Notifier:
    """설정값으로 알림기 생성

    Args:
        kind: "log" | "webhook" | "none" (None이면 MHD_NOTIFIER 환경변수)
        webhook_url: 웹훅 URL (None이면 MHD_WEBHOOK_URL)
        timeout: 웹훅 타임아웃 (None이면 MHD_WEBHOOK_TIMEOUT)

    Returns:
        Notifier 인스턴스 (알 수 없는 kind는 LogNotifier)
    """
    from mhd_tracker.settings import app_config

    kind = (kind or app_config.NOTIFIER_KIND).strip().lower()
    if kind == "webhook":
        return WebhookNotifier(
            webhook_url if webhook_url is not None else app_config.WEBHOOK_URL,
            timeout=timeout or app_config.WEBHOOK_TIMEOUT,
        )
    if kind == "none":
        return NullNotifier()
    return LogNotifier()


__all__ = [
    'Notifier',
    'NullNotifier',
    'LogNotifier',
    'WebhookNotifier',
    'PermissionState',
    'create_notifier',
]
