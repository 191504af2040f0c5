"""레포지토리 카탈로그 Pydantic 요청/응답 스키마 정의.

Repository catalog Pydantic request/response schema definitions.
Covers owners and tracked repositories.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# === 소유자 (Owner) 스키마 ===

class OwnerCreate(BaseModel):
    """소유자 생성 요청 스키마.

    Attributes:
        login: GitHub 로그인 (GitHub login)
        type: 계정 유형 (Account type: "User" or "Organization")
    """

    login: str = Field(min_length=1, max_length=255)
    type: str = Field(default="User", pattern=r"^(User|Organization)$")


class OwnerResponse(BaseModel):
    """소유자 응답 스키마 — Owner response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    login: str
    type: str
    created_at: datetime


# === 추적 레포지토리 (TrackedRepository) 스키마 ===

class TrackedRepositoryCreate(BaseModel):
    """추적 레포지토리 생성 요청 스키마.

    Tracked repository creation request schema.

    Attributes:
        full_name: 전체 이름 owner/name (Full "owner/name")
        description: 설명 (Description, optional)
        language: 주 사용 언어 (Primary language, optional)
        stars: 스타 수 (Stargazer count)
        html_url: GitHub URL (Web URL, optional)
        owner_id: 소유자 UUID (Owner identifier, optional)
        topics: 토픽 목록 (Topic names)
    """

    full_name: str = Field(pattern=r"^[^/\s]+/[^/\s]+$", max_length=512)
    description: str | None = None
    language: str | None = Field(default=None, max_length=100)
    stars: int = Field(default=0, ge=0)
    html_url: str | None = None
    owner_id: UUID | None = None
    topics: list[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        # 전체 이름의 두 번째 부분 — Short name after the slash
        return self.full_name.split("/", 1)[1]


class TrackedRepositoryUpdate(BaseModel):
    """추적 레포지토리 수정 요청 스키마 (부분 업데이트).

    Partial update; only fields sent by the client are applied.
    """

    description: str | None = None
    language: str | None = Field(default=None, max_length=100)
    stars: int | None = Field(default=None, ge=0)
    html_url: str | None = None
    owner_id: UUID | None = None


class TopicResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str


class TrackedRepositoryResponse(BaseModel):
    """추적 레포지토리 응답 스키마.

    Tracked repository response. ``owner`` and ``topics`` are filled only when
    the relation was requested; projected searches leave unloaded fields None.
    """

    id: UUID
    name: str | None = None
    full_name: str | None = None
    description: str | None = None
    language: str | None = None
    stars: int | None = None
    html_url: str | None = None
    owner_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    owner: OwnerResponse | None = None
    topics: list[TopicResponse] | None = None
