# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Extension routes registered explicitly at startup."""

from restcache.extensions.base import Extension, ExtensionRequest
from restcache.extensions.registry import ExtensionRegistry

__all__ = ["Extension", "ExtensionRegistry", "ExtensionRequest"]
