"""
domain/models.py 유닛 테스트

- to_quantity / to_threshold_days: 잘못된 값(무한대 포함)은 기본값
- AlertFlags.from_dict: 문자열 플래그 해석
- Item / Settings: 이전 키 호환
"""

import math

import pytest

from mhd_tracker.domain.models import AlertFlags, Item, Settings, to_quantity, to_threshold_days


class TestToQuantity:
    """수량 변환"""

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        ("4", 4),
        ("2.7", 2),
        (5.9, 5),
        (0, 1),
        (-3, 1),
        ("abc", 1),
        (None, 1),
        ("", 1),
        ("inf", 1),
        (float("inf"), 1),
        (1e999, 1),
        (float("nan"), 1),
    ])
    def test_values(self, value, expected):
        assert to_quantity(value) == expected


class TestToThresholdDays:
    """임박 기준 일수 변환"""

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [
        (7, 7),
        ("10", 10),
        ("2.7", 2),
        (0, 1),
        (-3, 1),
        ("abc", 1),
        (None, 1),
        ("inf", 1),
        (1e999, 1),
        (-math.inf, 1),
    ])
    def test_values(self, value, expected):
        assert to_threshold_days(value) == expected


class TestFromDict:
    """저장 데이터 복원"""

    @pytest.mark.unit
    def test_item_infinite_quantity_falls_back(self):
        item = Item.from_dict({"id": "A", "name": "우유", "quantity": float("inf")})
        assert item.quantity == 1

    @pytest.mark.unit
    def test_settings_infinite_threshold_falls_back(self):
        assert Settings.from_dict({"soonThresholdDays": 1e999}).soon_threshold_days == 1

    @pytest.mark.unit
    def test_alert_flags_string_false_is_false(self):
        flags = AlertFlags.from_dict({"soonAlerted": "false", "expiredAlerted": "true"})
        assert flags == AlertFlags(soon_alerted=False, expired_alerted=True)

    @pytest.mark.unit
    def test_alert_flags_legacy_and_missing(self):
        assert AlertFlags.from_dict({"soon": True}) == AlertFlags(soon_alerted=True)
        assert AlertFlags.from_dict({}) == AlertFlags()
