"""
웹훅 알림 모듈
- 설정된 URL로 JSON POST
- URL 미설정 시 권한 거부 (알림 없이 동작)
"""

from datetime import datetime
from typing import Optional

import requests

from mhd_tracker.notification.base import Notifier, PermissionState
from mhd_tracker.utils.logger import get_logger

logger = get_logger(__name__)


class WebhookNotifier(Notifier):
    """웹훅 알림 전송기"""

    def __init__(self, url: str, timeout: int = 10,
                 session: Optional[requests.Session] = None) -> None:
        """웹훅 알림 전송기 초기화

        Args:
            url: 웹훅 URL (비어 있으면 권한 거부)
            timeout: HTTP 타임아웃 (초)
            session: 재사용할 requests 세션 (없으면 requests.post 사용)
        """
        super().__init__()
        self.url = (url or "").strip()
        self.timeout = timeout
        self.session = session

    def _resolve_permission(self) -> PermissionState:
        if not self.url:
            logger.warning("MHD_WEBHOOK_URL 미설정. 웹훅 알림을 보내지 않습니다.")
            return PermissionState.DENIED
        return PermissionState.GRANTED

    def _deliver(self, title: str, body: str) -> None:
        payload = {
            "title": title,
            "body": body,
            "sent_at": datetime.now().isoformat(timespec="seconds"),
        }
        post = self.session.post if self.session is not None else requests.post

        try:
            response = post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            logger.info(f"Webhook sent: {title}")
        except requests.exceptions.RequestException as e:
            # 전송 실패는 로그만 남기고 코어 흐름은 계속
            logger.error(f"Webhook send failed: {e}")
