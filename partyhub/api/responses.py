"""Success envelope shared by every route: {success, data, message?, meta?}."""

from __future__ import annotations

import math
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from partyhub.api.v1.schemas.parties import PageMeta


def success_response(
    data: Any = None,
    message: str | None = None,
    meta: dict[str, Any] | None = None,
    status_code: int = 200,
) -> JSONResponse:
    content: dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        content["message"] = message
    if meta is not None:
        content["meta"] = meta
    return JSONResponse(content=jsonable_encoder(content), status_code=status_code)


def page_meta(page: int, limit: int, total: int) -> dict[str, int]:
    return PageMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    ).model_dump(by_alias=True)


def paginated_response(data: Any, page: int, limit: int, total: int) -> JSONResponse:
    return success_response(data, meta=page_meta(page, limit, total))


def error_content(
    message: str,
    code: str,
    errors: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    content: dict[str, Any] = {"success": False, "message": message, "code": code}
    if errors:
        content["errors"] = errors
    return content
