"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Error bodies carry a machine-readable ``code`` (``APP_<...>``) next to the
human message, so API clients can branch without parsing text.

Usage:
    from repo_catalog.utils.exceptions import EntityNotFoundError
    raise EntityNotFoundError("TrackedRepository", record_id)
"""

import re
from typing import Any

from fastapi import HTTPException, status

# 오류 코드 접두사 — Error code prefix
ERRORS_PREFIX: str = "APP"
INTERNAL_SERVER_ERROR: dict[str, str] = {
    "code": f"{ERRORS_PREFIX}_INTERNAL_SERVER_ERROR",
    "message": "Internal server error",
}


def format_error_code(name: str) -> str:
    """공백을 밑줄로 바꾸고 대문자로 변환합니다 — "Tracked Repository" -> "TRACKED_REPOSITORY"."""
    return re.sub(r"\s", "_", name).upper()


def error_body(code: str, message: str) -> dict[str, str]:
    return {"code": f"{ERRORS_PREFIX}_{format_error_code(code)}", "message": message}


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.

    Args:
        detail: 오류 메시지 또는 본문 (Error message or body, default: "Resource not found")
    """

    def __init__(self, detail: Any = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class EntityNotFoundError(NotFoundError):
    """ID 대상 작업에서 엔티티가 없을 때 발생하는 404 예외.

    Raised by the service layer when an id-targeted operation finds nothing.

    Attributes:
        entity: 엔티티 종류 (Entity kind, e.g. "TrackedRepository")
        record_id: 요청된 ID (Requested identifier)
    """

    def __init__(self, entity: str, record_id: Any) -> None:
        self.entity: str = entity
        self.record_id: Any = record_id
        super().__init__(
            error_body(f"{entity}_NOT_FOUND", f"The {entity} with id {record_id} was not found.")
        )


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 고유 값이 이미 사용 중일 때 사용.

    Raised when creating an entity whose unique field value is already taken
    (owner login, repository full name).
    """

    def __init__(self, entity: str, field: str, value: Any) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_body(f"{entity}_ALREADY_EXISTS", f"A {entity} with {field} {value} already exists."),
        )


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception for request data Pydantic cannot reject alone.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: Any = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
