# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""One GET/POST route per cache command, all returning the batch envelope."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from restcache.api.params import RequestParseError, merge_params
from restcache.core.constants import Command
from restcache.gateway.gateway import CommandGateway
from restcache.gateway.results import BatchResult

router = APIRouter()

_SUMMARIES: dict[Command, str] = {
    Command.PING: "Liveness check, returns PONG",
    Command.SET: "Set every key=value pair",
    Command.GET: "Read the value of every key",
    Command.DEL: "Delete every key",
    Command.KEYS: "List all keys",
    Command.INCR: "Increment every key by its value (default 1)",
    Command.DECR: "Decrement every key by its value (default 1)",
    Command.EXPIRE: "Expire every key after its value in milliseconds",
    Command.UNEXPIRE: "Clear the TTL of every key",
    Command.RANDOM: "Return a random key",
    Command.STATS: "Process and cache statistics",
    Command.BACKUP: "Write a backup to disk and return its name",
    Command.RESTORE: "Replace the cache with the named backup",
    Command.DUMP: "Return the cache content, or a named backup's content",
    Command.FLUSH: "Remove every key",
}


class ErrorItem(BaseModel):
    message: str
    index: int | None


class Envelope(BaseModel):
    errors: list[ErrorItem]
    response: list[Any]

    @classmethod
    def from_batch(cls, batch: BatchResult) -> Envelope:
        return cls.model_validate(batch.to_dict())

    @classmethod
    def request_error(cls, message: str) -> Envelope:
        return cls(errors=[ErrorItem(message=message, index=None)], response=[])


def get_gateway(request: Request) -> CommandGateway:
    return request.app.state.gateway


def _command_endpoint(command: Command):
    async def endpoint(
        request: Request,
        gateway: CommandGateway = Depends(get_gateway),
    ) -> Envelope:
        try:
            items = await merge_params(request)
        except RequestParseError as exc:
            return Envelope.request_error(str(exc))
        batch = await gateway.execute(command, items)
        return Envelope.from_batch(batch)

    endpoint.__name__ = f"{command.value}_command"
    return endpoint


for _command in Command:
    router.add_api_route(
        f"/{_command.value}",
        _command_endpoint(_command),
        methods=["GET", "POST"],
        response_model=Envelope,
        summary=_SUMMARIES[_command],
    )
