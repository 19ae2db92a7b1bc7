# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tagged per-item results and the batch response envelope."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from restcache.core.constants import ErrorKind


@dataclass(frozen=True)
class ItemResult:
    """Outcome of one item of a command: either a value or a tagged error.

    ``index`` is the item's position in the request, or ``None`` for an
    error that applies to the whole request.
    """

    is_ok: bool
    index: int | None
    value: Any = None
    kind: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def ok(cls, value: Any, *, index: int | None = 0) -> ItemResult:
        return cls(is_ok=True, index=index, value=value)

    @classmethod
    def err(cls, kind: ErrorKind, message: str, *, index: int | None = 0) -> ItemResult:
        return cls(is_ok=False, index=index, kind=kind, message=message)


@dataclass(frozen=True)
class BatchError:
    message: str
    index: int | None

    def to_dict(self) -> dict[str, object]:
        return {"message": self.message, "index": self.index}


@dataclass
class BatchResult:
    """Response envelope.

    ``response`` holds successful values only, in request order.  It is not
    positionally aligned with the request; ``errors[].index`` is the only
    way back to the failing item.
    """

    response: list[Any] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def from_results(cls, results: Iterable[ItemResult], *, spread: bool = False) -> BatchResult:
        """Build the envelope from tagged results.

        With *spread* (single-item commands) a ``None`` value contributes
        nothing and a list value contributes its elements.
        """
        batch = cls()
        for result in results:
            if not result.is_ok:
                batch.errors.append(BatchError(message=result.message or "", index=result.index))
            elif not spread:
                batch.response.append(result.value)
            elif isinstance(result.value, list):
                batch.response.extend(result.value)
            elif result.value is not None:
                batch.response.append(result.value)
        return batch

    def to_dict(self) -> dict[str, object]:
        return {
            "errors": [e.to_dict() for e in self.errors],
            "response": list(self.response),
        }
