# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""The extension capability: a route path plus a request handler."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from restcache.gateway.gateway import CommandGateway


@dataclass(frozen=True)
class ExtensionRequest:
    """What an extension handler receives for one HTTP request.

    ``params`` is the merged, ordered ``(key, value)`` list, the same shape
    the built-in commands receive.
    """

    path: str
    method: str
    params: list[tuple[str, Any]]
    gateway: CommandGateway


# The handler may be sync or async.  Its return value is wrapped in the
# standard envelope: a ``BatchResult`` is used as-is, a list becomes the
# response list, ``None`` an empty one, anything else a one-element list.
ExtensionHandler = Callable[[ExtensionRequest], Any]


@dataclass(frozen=True)
class Extension:
    """A custom route served next to the built-in commands."""

    path: str
    handle: ExtensionHandler
    description: str = ""

    def __post_init__(self) -> None:
        if not self.path.startswith("/") or self.path == "/":
            raise ValueError(f"Extension path must start with '/' and name a route: {self.path!r}")
