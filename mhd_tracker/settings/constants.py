"""
MHD 트래커 - 비즈니스 상수
- 저장소 키
- 설정 기본값
- 상태 / 정렬 문자열
- 알림 문구

정식 경로: from mhd_tracker.settings.constants import ...
"""

# =====================================================================
# 저장소 키 (key-value 문서 3종)
# =====================================================================
STORAGE_KEY_ITEMS = "mhd_tracker_items_v1"
STORAGE_KEY_SETTINGS = "mhd_tracker_settings_v1"
STORAGE_KEY_NOTIFIED = "mhd_tracker_notified_v1"

# =====================================================================
# 설정 기본값
# =====================================================================
DEFAULT_SOON_THRESHOLD_DAYS = 7     # "임박" 판정 기준 일수
DEFAULT_NOTIFY_SOON = True
DEFAULT_NOTIFY_EXPIRED = True
MIN_SOON_THRESHOLD_DAYS = 1
DEFAULT_QUANTITY = 1

# =====================================================================
# 상태 / 필터 / 정렬 문자열
# =====================================================================
STATUS_OK = "ok"
STATUS_SOON = "soon"
STATUS_EXPIRED = "expired"
STATUS_FILTER_ALL = "all"

STATUS_LABELS = {
    STATUS_OK: "OK",
    STATUS_SOON: "임박",
    STATUS_EXPIRED: "경과",
}

SORT_NAME_ASC = "nameAsc"
SORT_NAME_DESC = "nameDesc"
SORT_MHD_ASC = "mhdAsc"
SORT_MHD_DESC = "mhdDesc"
SORT_DAYS_ASC = "daysAsc"
SORT_DAYS_DESC = "daysDesc"
DEFAULT_SORT = SORT_MHD_ASC

# 검색 대상 필드 (순서 무관)
SEARCH_FIELDS = ("name", "sku", "category", "supplier", "lot")

# =====================================================================
# 알림 문구
# =====================================================================
ALERT_TITLE_EXPIRED = "유통기한 경과"
ALERT_TITLE_SOON = "유통기한 임박"
ALERT_BODY_EXPIRED = "{name} (유통기한 {expiry}) 유통기한이 지났습니다."
ALERT_BODY_SOON = "{name} 유통기한 {days}일 남음 (유통기한 {expiry})."

# =====================================================================
# 내보내기
# =====================================================================
EXPORT_FILENAME_PREFIX = "mhd-tracker-export"
