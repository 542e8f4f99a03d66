"""
Domain 계층 -- 순수 비즈니스 로직 (I/O 없음)

- models: 값 객체
- status_classifier: 남은 일수/상태 판정
- notification_tracker: 알림 중복 방지
- item_query: 필터/검색/정렬
"""
