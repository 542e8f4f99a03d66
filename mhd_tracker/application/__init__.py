"""
Application 계층 -- 오케스트레이션 + 서비스

Usage:
    from mhd_tracker.application.bootstrap import create_tracker
    from mhd_tracker.application.services.tracker_service import TrackerService
    from mhd_tracker.application.use_cases.expiry_alert_flow import ExpiryAlertFlow
"""
