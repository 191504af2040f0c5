"""공통 ORM 믹스인 — 타임스탬프와 소프트 삭제 표식.

Shared ORM mixins — timestamp columns and the soft-delete capability.

An entity type is soft-deletable exactly when its class mixes in
``SoftDeleteMixin``; the query engine reads that flag from the class,
never from the live table schema.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


def utc_now() -> datetime:
    """현재 UTC 시각 — Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class TimestampMixin:
    """생성/수정 일시 컬럼 믹스인.

    Adds ``created_at`` and ``updated_at`` columns managed on the Python side.
    """

    # 생성 일시 — Creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    # 수정 일시 — Last update timestamp (UTC), refreshed on every ORM update
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )


class SoftDeleteMixin:
    """소프트 삭제 믹스인 — ``deleted_at`` 이 NULL이면 활성 레코드.

    Soft-delete marker. ``deleted_at`` is NULL for live rows and holds the
    deletion time once the row has been soft-deleted.
    """

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


def supports_soft_delete(model: type) -> bool:
    """모델이 소프트 삭제를 지원하는지 확인합니다.

    Return whether ``model`` declares the soft-delete capability.
    """
    return isinstance(model, type) and issubclass(model, SoftDeleteMixin)
