# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Registry of extensions, built from an explicit list at startup.

Modules listed in ``RESTCACHE_EXTENSION_MODULES`` are imported by dotted
path and must expose ``extension`` (one :class:`Extension`) or
``extensions`` (a list of them).  Nothing is discovered by scanning the
filesystem.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable

from restcache.extensions.base import Extension

logger = logging.getLogger("restcache.extensions.registry")


class ExtensionRegistry:
    """Path-keyed extension registry.  Registering an existing path replaces it."""

    def __init__(self, extensions: Iterable[Extension] = ()) -> None:
        self._extensions: dict[str, Extension] = {}
        for ext in extensions:
            self.register(ext)

    def register(self, extension: Extension) -> None:
        if extension.path in self._extensions:
            logger.info("Replacing extension at %s", extension.path)
        else:
            logger.info("Registered extension at %s", extension.path)
        self._extensions[extension.path] = extension

    def unregister(self, path: str) -> bool:
        """Remove the extension at *path*.  Returns ``True`` if one existed."""
        return self._extensions.pop(path, None) is not None

    def get(self, path: str) -> Extension | None:
        return self._extensions.get(path)

    def list_extensions(self) -> list[Extension]:
        return list(self._extensions.values())

    def __len__(self) -> int:
        return len(self._extensions)

    def __contains__(self, path: object) -> bool:
        return path in self._extensions

    def load_from_module_paths(self, paths: Iterable[str]) -> int:
        """Import each dotted module path and register what it exports.

        Modules that fail to import or export nothing usable are logged
        and skipped.  Returns the number of extensions registered.
        """
        count = 0
        for mod_path in paths:
            try:
                module = importlib.import_module(mod_path)
            except Exception:
                logger.exception("Failed to import extension module %s", mod_path)
                continue

            found = self._collect_from_module(module)
            if not found:
                logger.warning("Module %s exports no extension", mod_path)
            for ext in found:
                self.register(ext)
                count += 1
        return count

    @staticmethod
    def _collect_from_module(module: object) -> list[Extension]:
        found: list[Extension] = []
        single = getattr(module, "extension", None)
        if isinstance(single, Extension):
            found.append(single)
        many = getattr(module, "extensions", None)
        if isinstance(many, list | tuple):
            found.extend(e for e in many if isinstance(e, Extension))
        return found
