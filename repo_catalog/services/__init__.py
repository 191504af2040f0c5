"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
``base`` adapts any repository contract to not-found semantics; entity
modules add response mapping on top.
"""
