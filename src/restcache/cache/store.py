# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory key/value store with per-key expiry timers.

All methods are synchronous and are meant to be called from the event
loop thread.  Expiry timers are scheduled with ``loop.call_later`` on the
same loop, so a timer callback never runs in the middle of a command.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
from collections.abc import Mapping
from typing import Any

from restcache.core.constants import MAX_EXPIRY_MS, PONG
from restcache.core.exceptions import ValidationError

logger = logging.getLogger("restcache.cache.store")

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def coerce_int(value: Any, *, default: int | None, message: str) -> int:
    """Interpret *value* as an integer.

    ``None`` and the empty string resolve to *default*; when *default* is
    also ``None`` they are invalid.  Raises :class:`ValidationError` with
    *message* for anything that is not integer-coercible.
    """
    if value is None or value == "":
        if default is None:
            raise ValidationError(message)
        return default
    if isinstance(value, bool):
        raise ValidationError(message)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(message)
    if isinstance(value, str):
        # Plain decimal digits only; no "1_000", no non-ASCII digits.
        text = value.strip()
        if not _INTEGER_RE.fullmatch(text):
            raise ValidationError(message)
        return int(text)
    raise ValidationError(message)


class _ExpiryHandle:
    """A pending deletion for one key."""

    __slots__ = ("generation", "timer")

    def __init__(self, timer: asyncio.TimerHandle, generation: int) -> None:
        self.timer = timer
        self.generation = generation

    def cancel(self) -> None:
        self.timer.cancel()


class CacheStore:
    """Key/value map plus at most one live expiry handle per key.

    Args:
        default_expiry_ms: TTL applied by :meth:`set` to keys that have no
            active expiry.  ``None`` or a value ``<= 0`` disables it.
        loop: Event loop used for expiry timers.  Defaults to the running
            loop at the time a timer is scheduled.
    """

    def __init__(
        self,
        default_expiry_ms: int | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._values: dict[str, Any] = {}
        self._expiry: dict[str, _ExpiryHandle] = {}
        self._generation = 0
        self._loop = loop
        if default_expiry_ms is not None and default_expiry_ms > 0:
            self._default_expiry_ms: int | None = default_expiry_ms
        else:
            self._default_expiry_ms = None

    @property
    def default_expiry_ms(self) -> int | None:
        return self._default_expiry_ms

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def ping(self) -> str:
        logger.debug("PING")
        return PONG

    def set(self, key: str, value: Any) -> bool:
        logger.debug("SET: [%s=%s]", key, value)
        self._values[key] = value
        # Overwriting a value never resets an existing TTL.
        if self._default_expiry_ms is not None and key not in self._expiry:
            self._schedule(key, self._default_expiry_ms)
        return True

    def get(self, key: str) -> Any:
        logger.debug("GET: [%s]", key)
        return self._values.get(key)

    def delete(self, key: str) -> bool:
        logger.debug("DEL: [%s]", key)
        self._values.pop(key, None)
        self._cancel(key)
        return True

    def keys(self) -> list[str]:
        logger.debug("KEYS")
        return list(self._values)

    def incr(self, key: str, by: Any = None) -> int:
        logger.debug("INCR: [%s, %s]", key, by)
        return self._adjust(key, by, sign=1, verb="increment")

    def decr(self, key: str, by: Any = None) -> int:
        logger.debug("DECR: [%s, %s]", key, by)
        return self._adjust(key, by, sign=-1, verb="decrement")

    def expire(self, key: str, millis: Any) -> bool:
        """Delete *key* after *millis* milliseconds, replacing any prior TTL."""
        logger.debug("EXPIRE: [%s, %s]", key, millis)
        message = f"Invalid time in milliseconds passed to EXPIRE: {millis}"
        delay = coerce_int(millis, default=None, message=message)
        if delay > MAX_EXPIRY_MS:
            raise ValidationError(message)
        if key not in self._values:
            return True
        self._schedule(key, delay)
        return True

    def unexpire(self, key: str) -> bool:
        logger.debug("UNEXPIRE: [%s]", key)
        self._cancel(key)
        return True

    def random(self) -> str | None:
        logger.debug("RANDOM")
        if not self._values:
            return None
        return random.choice(list(self._values))

    def flush(self) -> bool:
        logger.debug("FLUSH")
        self._cancel_all()
        self._values.clear()
        return True

    # ------------------------------------------------------------------
    # Snapshot access (used by the backup manager)
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of the value map.  Expiry state is not included."""
        return dict(self._values)

    def load(self, contents: Mapping[str, Any]) -> None:
        """Replace the whole value map; every loaded key starts without a TTL."""
        self._cancel_all()
        self._values = dict(contents)
        logger.info("Store replaced with %d keys", len(self._values))

    def size(self) -> int:
        return len(self._values)

    def expiring_count(self) -> int:
        return len(self._expiry)

    def has_expiry(self, key: str) -> bool:
        return key in self._expiry

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _adjust(self, key: str, by: Any, *, sign: int, verb: str) -> int:
        delta = coerce_int(
            by,
            default=1,
            message=f"Invalid value [{by}] to {verb} by, must be a number.",
        )
        current = self._values.get(key)
        base = coerce_int(
            current,
            default=0,
            message=f"Invalid cached value [{current}] to {verb}, must be a number.",
        )
        result = base + sign * delta
        self.set(key, result)
        return result

    def _schedule(self, key: str, delay_ms: int) -> None:
        delay = max(delay_ms, 0) / 1000
        loop = self._loop or asyncio.get_running_loop()
        # Cancel and install with no await in between.
        self._cancel(key)
        self._generation += 1
        generation = self._generation
        timer = loop.call_later(delay, self._fire, key, generation)
        self._expiry[key] = _ExpiryHandle(timer, generation)

    def _fire(self, key: str, generation: int) -> None:
        handle = self._expiry.get(key)
        if handle is None or handle.generation != generation:
            return
        logger.debug("EXPIRED: [%s]", key)
        del self._expiry[key]
        self._values.pop(key, None)

    def _cancel(self, key: str) -> None:
        handle = self._expiry.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _cancel_all(self) -> None:
        for handle in self._expiry.values():
            handle.cancel()
        self._expiry.clear()
