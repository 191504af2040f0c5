"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic migrations and relationship resolution rely on.

Modules:
    base: 타임스탬프/소프트 삭제 믹스인 (Timestamp and soft-delete mixins)
    repository: 소유자, 레포지토리, 토픽 (Owner, TrackedRepository, RepositoryTopic)
"""

from repo_catalog.models.base import SoftDeleteMixin, TimestampMixin, supports_soft_delete
from repo_catalog.models.repository import Owner, RepositoryTopic, TrackedRepository

__all__ = [
    "SoftDeleteMixin", "TimestampMixin", "supports_soft_delete",
    "Owner", "TrackedRepository", "RepositoryTopic",
]
