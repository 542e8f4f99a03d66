"""
Infrastructure 계층 -- 모든 I/O 관련 모듈

서브패키지:
- database: DB 커넥션, Repository, 스키마, 저장 어댑터
"""
