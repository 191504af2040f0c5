"""검색 요청 로깅 미들웨어 — 요청 하나당 구조화 이벤트 하나.

Request logging middleware for the catalog API.
Sends one structured event per API request to Axiom: method, path, query
parameters (the search filters), masked request body, status code, error
reason and duration. Without Axiom credentials the same event goes to the
``repo_catalog.access`` logger instead.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from repo_catalog.config import settings

logger = logging.getLogger("repo_catalog.access")

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅하지 않는 경로 (health check, API docs)
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_MAX_BODY_CHARS: int = 2000
_MAX_ERROR_CHARS: int = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > _MAX_BODY_CHARS:
        return data[:_MAX_BODY_CHARS] + "...(truncated)"
    return data


def _query_params(request: Request) -> dict[str, Any] | None:
    # 반복 파라미터(ids, relations)는 목록으로 유지 — Repeated params stay lists
    if not request.query_params:
        return None
    params: dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values if len(values) > 1 else values[0]
    return _mask(params)


def _error_detail(body: bytes) -> str:
    """에러 응답 본문에서 사유 추출 — Extract the reason from an error response body."""
    try:
        detail: Any = json.loads(body).get("detail", body.decode("utf-8", errors="replace"))
    except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return body.decode("utf-8", errors="replace")[:_MAX_ERROR_CHARS]
    if isinstance(detail, dict):
        detail = detail.get("code") or detail.get("message") or str(detail)
    return str(detail)[:_MAX_ERROR_CHARS]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """요청별 이벤트를 Axiom 또는 access 로거로 보내는 미들웨어.

    Emits one event per request: to Axiom when a token and dataset are
    configured, otherwise to the ``repo_catalog.access`` logger.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    def _emit(self, event: dict[str, Any]) -> None:
        if self._client is None:
            logger.info("%s %s -> %s (%sms)", event["method"], event["path"], event["status_code"], event["duration_ms"])
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}

        params = _query_params(request)
        if params:
            event["query_params"] = params

        # Request body 읽기 — Read request body (only for methods with body)
        if request.method in ("POST", "PUT", "PATCH"):
            body_bytes = await request.body()
            if body_bytes:
                try:
                    event["request_body"] = _mask(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request_body"] = "(non-json body)"

        event["status_code"] = 500
        try:
            response = await call_next(request)
            event["status_code"] = response.status_code

            # 에러 응답시 body에서 사유 추출 후 다시 감싸서 반환
            # Extract error detail, then re-wrap the consumed body
            if response.status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event["error"] = _error_detail(resp_body)
                response = Response(
                    content=resp_body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            self._emit(event)

        return response
