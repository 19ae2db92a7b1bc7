# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Async HTTP client for a RESTCache server.

Usage::

    from restcache.client import RestCacheClient

    client = RestCacheClient("http://localhost:7654")
    await client.set(["a", "b"], ["1", "2"])
    result = await client.get(["a", "b"])
    print(result.response)   # ["1", "2"]
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from restcache.core.exceptions import RestCacheError

logger = logging.getLogger("restcache.client")

MODE_GET = "GET"
MODE_POST = "POST"
_TIMEOUT = 10.0


class ClientError(RestCacheError):
    """The server could not be reached or answered with something unexpected."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class CommandResult:
    """The ``{errors, response}`` envelope returned by every command."""

    errors: list[dict[str, Any]] = field(default_factory=list)
    response: list[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_indexes(self) -> list[int | None]:
        return [e.get("index") for e in self.errors]


def _normalize(values: Any) -> list[Any] | None:
    if values is None:
        return None
    if isinstance(values, list | tuple):
        return list(values)
    return [values]


class RestCacheClient:
    """Client for the RESTCache HTTP interface.

    Parameters
    ----------
    base_url:
        Server URL, e.g. ``http://localhost:7654``.
    mode:
        ``"POST"`` (JSON body, the default) or ``"GET"`` (query string).
    timeout:
        HTTP timeout in seconds.
    transport:
        Optional httpx transport, e.g. ``httpx.ASGITransport`` in tests.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:7654",
        *,
        mode: str = MODE_POST,
        timeout: float = _TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        mode = mode.upper()
        if mode not in (MODE_GET, MODE_POST):
            raise ValueError(f"Unknown client mode: {mode}")
        self.base_url = base_url.rstrip("/")
        self.mode = mode
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def ping(self) -> CommandResult:
        return await self._send("/ping")

    async def set(self, keys: Any, values: Any) -> CommandResult:
        key_list = _normalize(keys) or []
        value_list = _normalize(values) or []
        if len(key_list) != len(value_list):
            raise ValueError("Length of keys must equal the length of values.")
        return await self._send("/set", key_list, value_list)

    async def get(self, keys: Any) -> CommandResult:
        return await self._send("/get", _normalize(keys))

    async def delete(self, keys: Any) -> CommandResult:
        return await self._send("/del", _normalize(keys))

    async def keys(self) -> CommandResult:
        return await self._send("/keys")

    async def incr(self, keys: Any, by: Any = None) -> CommandResult:
        return await self._adjust("/incr", keys, by)

    async def decr(self, keys: Any, by: Any = None) -> CommandResult:
        return await self._adjust("/decr", keys, by)

    async def expire(self, keys: Any, millis: Any) -> CommandResult:
        key_list = _normalize(keys) or []
        times = _normalize(millis) or []
        if len(key_list) != len(times):
            raise ValueError("Length of keys must equal the length of millisecond values.")
        return await self._send("/expire", key_list, times)

    async def unexpire(self, keys: Any) -> CommandResult:
        return await self._send("/unexpire", _normalize(keys))

    async def random(self) -> CommandResult:
        return await self._send("/random")

    async def stats(self) -> CommandResult:
        return await self._send("/stats")

    async def backup(self) -> CommandResult:
        return await self._send("/backup")

    async def restore(self, backup_name: str) -> CommandResult:
        return await self._send("/restore", [backup_name])

    async def dump(self, backup_name: str | None = None) -> CommandResult:
        keys = [backup_name] if backup_name is not None else None
        return await self._send("/dump", keys)

    async def flush(self) -> CommandResult:
        return await self._send("/flush")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _adjust(self, path: str, keys: Any, by: Any) -> CommandResult:
        key_list = _normalize(keys) or []
        deltas = _normalize(by)
        if deltas is not None and len(deltas) != len(key_list):
            raise ValueError("Length of keys must equal the length of delta values, or deltas must be None.")
        return await self._send(path, key_list, deltas)

    async def _send(
        self,
        path: str,
        keys: Sequence[str] | None = None,
        values: Sequence[Any] | None = None,
    ) -> CommandResult:
        pairs: list[tuple[str, Any]] = []
        for i, key in enumerate(keys or []):
            pairs.append((key, values[i] if values is not None else None))

        url = f"{self.base_url}{path}"
        logger.debug("%s %s %s", self.mode, url, pairs)
        try:
            async with self._client() as client:
                if self.mode == MODE_GET:
                    params = [(k, "" if v is None else str(v)) for k, v in pairs]
                    resp = await client.get(url, params=params)
                else:
                    resp = await client.post(url, json=dict(pairs))
        except httpx.HTTPError as exc:
            raise ClientError(f"Request to {url} failed: {exc}") from exc

        if not resp.is_success:
            raise ClientError(f"{path}: HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as exc:
            raise ClientError(f"{path}: response is not JSON", status_code=resp.status_code) from exc
        return CommandResult(errors=data.get("errors") or [], response=data.get("response") or [])
