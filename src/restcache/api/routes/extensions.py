# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Routes for registered extensions."""

from __future__ import annotations

import inspect
import logging

from fastapi import APIRouter, Depends, Request

from restcache.api.params import RequestParseError, merge_params
from restcache.api.routes.commands import Envelope, get_gateway
from restcache.extensions.base import Extension, ExtensionRequest
from restcache.extensions.registry import ExtensionRegistry
from restcache.gateway.gateway import CommandGateway
from restcache.gateway.results import BatchResult, ItemResult

logger = logging.getLogger("restcache.api.routes.extensions")


def _to_batch(value: object) -> BatchResult:
    if isinstance(value, BatchResult):
        return value
    return BatchResult.from_results([ItemResult.ok(value)], spread=True)


def _extension_endpoint(extension: Extension):
    async def endpoint(
        request: Request,
        gateway: CommandGateway = Depends(get_gateway),
    ) -> Envelope:
        try:
            params = await merge_params(request)
        except RequestParseError as exc:
            return Envelope.request_error(str(exc))

        ext_request = ExtensionRequest(
            path=extension.path,
            method=request.method,
            params=params,
            gateway=gateway,
        )
        try:
            result = extension.handle(ext_request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.exception("Extension at %s failed", extension.path)
            return Envelope.request_error(f"Extension {extension.path} failed: {exc}")
        return Envelope.from_batch(_to_batch(result))

    return endpoint


def build_router(registry: ExtensionRegistry) -> APIRouter:
    """Create one GET/POST route per registered extension."""
    router = APIRouter()
    for extension in registry.list_extensions():
        router.add_api_route(
            extension.path,
            _extension_endpoint(extension),
            methods=["GET", "POST"],
            response_model=Envelope,
            summary=extension.description or None,
        )
    return router
