# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Merge query, body and path parameters into one ordered key/value list.

Precedence is PATH > BODY > QUERY: a later source overrides the value of
a key already seen but the key keeps its first position.
"""

from __future__ import annotations

import json
from typing import Any

from starlette.requests import Request

from restcache.core.exceptions import ValidationError


class RequestParseError(ValidationError):
    """The request body could not be decoded."""


async def _body_params(request: Request) -> list[tuple[str, Any]]:
    if request.method not in ("POST", "PUT", "PATCH"):
        return []

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/json":
        raw = await request.body()
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise RequestParseError("Request body is not valid JSON.") from None
        if not isinstance(data, dict):
            raise RequestParseError("Request body must be a JSON object of key/value pairs.")
        return list(data.items())

    if content_type in ("application/x-www-form-urlencoded", "multipart/form-data"):
        form = await request.form()
        # File uploads are not cache values.
        return [(k, v) for k, v in form.multi_items() if isinstance(v, str)]

    return []


async def merge_params(request: Request) -> list[tuple[str, Any]]:
    """Return the request's ``(key, value)`` pairs in first-seen order."""
    merged: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        merged[key] = value
    for key, value in await _body_params(request):
        merged[key] = value
    for key, value in request.path_params.items():
        merged[key] = value
    return list(merged.items())
