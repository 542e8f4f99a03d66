"""
Repository -- 전체 re-export

Usage:
    from mhd_tracker.infrastructure.database.repos import KeyValueRepository
"""

from .kv_store_repo import KeyValueRepository

__all__ = [
    "KeyValueRepository",
]
