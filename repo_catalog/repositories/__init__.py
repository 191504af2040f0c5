"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database query layer.
``base`` holds the generic contract and its SQLAlchemy adapter; each entity
module wires the adapter with its own filter allow-lists.
"""
