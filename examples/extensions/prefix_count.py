# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Example extension counting keys by prefix.

Register it by listing its module path in the server configuration::

    RESTCACHE_EXTENSION_MODULES=prefix_count restcache serve

with this directory on ``PYTHONPATH``.  Then::

    curl 'http://localhost:7654/count?user:&session:'

returns ``{"errors": [], "response": [{"user:": 12, "session:": 3}]}``.
"""

from __future__ import annotations

from restcache.extensions import Extension, ExtensionRequest


def count_by_prefix(request: ExtensionRequest) -> dict[str, int]:
    keys = request.gateway.store.keys()
    return {
        prefix: sum(1 for k in keys if k.startswith(prefix))
        for prefix, _ in request.params
    }


extension = Extension(
    path="/count",
    handle=count_by_prefix,
    description="Count keys starting with each given prefix",
)
