"""GitHub 레포지토리 카탈로그 ORM 모델 정의.

Repository catalog SQLAlchemy ORM model definitions.
Tracks GitHub repositories together with their owners and topics.

Tables:
    - owners: 레포지토리 소유자 (GitHub user or organization)
    - tracked_repositories: 추적 중인 레포지토리 (soft-deletable)
    - repository_topics: 레포지토리 토픽 태그 (Topic tags per repository)
"""

import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repo_catalog.database import Base
from repo_catalog.models.base import SoftDeleteMixin, TimestampMixin


class Owner(TimestampMixin, Base):
    """레포지토리 소유자 모델.

    Repository owner — a GitHub user or organization account.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        login: GitHub 로그인 이름 (GitHub login, unique)
        type: 계정 유형 (Account type: "User" or "Organization")

    Relationships:
        repositories: 소유한 레포지토리 목록 (Tracked repositories of this owner)
    """

    __tablename__ = "owners"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # GitHub 로그인 — GitHub login (unique, max 255 chars)
    login: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 계정 유형 — "User" 또는 "Organization"
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="User")

    repositories = relationship("TrackedRepository", back_populates="owner", passive_deletes=True)


class TrackedRepository(SoftDeleteMixin, TimestampMixin, Base):
    """추적 중인 GitHub 레포지토리 모델.

    Tracked GitHub repository. Soft-deletable: deleting keeps the row and
    stamps ``deleted_at`` so it can be restored later.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        owner_id: 소유자 FK (Owner foreign key, nullable)
        name: 레포지토리 이름 (Short repository name)
        full_name: 전체 이름 owner/name (Full "owner/name" identifier)
        description: 설명 (Free-form description)
        language: 주 사용 언어 (Primary language)
        stars: 스타 수 (Stargazer count)
        html_url: GitHub 페이지 URL (GitHub web URL)

    Relationships:
        owner: 소유자 (Owning account, many-to-one)
        topics: 토픽 목록 (Topic tags, one-to-many)
    """

    __tablename__ = "tracked_repositories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("owners.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    stars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    html_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    owner = relationship("Owner", back_populates="repositories")
    topics = relationship(
        "RepositoryTopic",
        back_populates="repository",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RepositoryTopic.name",
    )


class RepositoryTopic(Base):
    """레포지토리 토픽 태그 모델.

    Topic tag attached to a tracked repository.
    """

    __tablename__ = "repository_topics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    repository_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tracked_repositories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    repository = relationship("TrackedRepository", back_populates="topics")
