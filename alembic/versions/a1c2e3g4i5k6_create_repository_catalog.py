"""create_repository_catalog

Revision ID: a1c2e3g4i5k6
Revises:
Create Date: 2026-10-19 09:00:00.000000

소유자(owners), 추적 레포지토리(tracked_repositories), 토픽(repository_topics) 테이블 생성.
tracked_repositories는 deleted_at 컬럼으로 소프트 삭제를 지원.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "a1c2e3g4i5k6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "owners",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("login", sa.String(255), nullable=False, unique=True),
        sa.Column("type", sa.String(20), server_default="User", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "tracked_repositories",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("owner_id", UUID(as_uuid=True), sa.ForeignKey("owners.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(512), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("language", sa.String(100), nullable=True),
        sa.Column("stars", sa.Integer(), server_default="0", nullable=False),
        sa.Column("html_url", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_tracked_repositories_language", "tracked_repositories", ["language"])
    op.create_index("ix_tracked_repositories_deleted_at", "tracked_repositories", ["deleted_at"])

    op.create_table(
        "repository_topics",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "repository_id",
            UUID(as_uuid=True),
            sa.ForeignKey("tracked_repositories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
    )
    op.create_index("ix_repository_topics_repository_id", "repository_topics", ["repository_id"])


def downgrade() -> None:
    op.drop_index("ix_repository_topics_repository_id")
    op.drop_table("repository_topics")
    op.drop_index("ix_tracked_repositories_deleted_at")
    op.drop_index("ix_tracked_repositories_language")
    op.drop_table("tracked_repositories")
    op.drop_table("owners")
