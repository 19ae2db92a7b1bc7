# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the extension capability and its registry."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from restcache.extensions import Extension, ExtensionRegistry


def _handler(request):
    return None


# ---------------------------------------------------------------------------
# Extension
# ---------------------------------------------------------------------------


class TestExtension:
    def test_valid(self) -> None:
        ext = Extension(path="/count", handle=_handler, description="Count keys")
        assert ext.path == "/count"

    @pytest.mark.parametrize("path", ["count", "/", ""])
    def test_invalid_path(self, path: str) -> None:
        with pytest.raises(ValueError, match="Extension path"):
            Extension(path=path, handle=_handler)


# ---------------------------------------------------------------------------
# ExtensionRegistry
# ---------------------------------------------------------------------------


class TestExtensionRegistry:
    def test_register_and_get(self) -> None:
        registry = ExtensionRegistry([Extension(path="/a", handle=_handler)])
        assert "/a" in registry
        assert len(registry) == 1
        assert registry.get("/a").path == "/a"
        assert registry.get("/b") is None

    def test_register_replaces_same_path(self) -> None:
        first = Extension(path="/a", handle=_handler, description="first")
        second = Extension(path="/a", handle=_handler, description="second")
        registry = ExtensionRegistry([first, second])
        assert len(registry) == 1
        assert registry.get("/a").description == "second"

    def test_unregister(self) -> None:
        registry = ExtensionRegistry([Extension(path="/a", handle=_handler)])
        assert registry.unregister("/a") is True
        assert registry.unregister("/a") is False
        assert registry.list_extensions() == []

    def test_list_keeps_registration_order(self) -> None:
        registry = ExtensionRegistry()
        for path in ("/z", "/a", "/m"):
            registry.register(Extension(path=path, handle=_handler))
        assert [e.path for e in registry.list_extensions()] == ["/z", "/a", "/m"]


class TestLoadFromModulePaths:
    @pytest.fixture
    def module_dir(self, tmp_path: Path, monkeypatch) -> Path:
        directory = tmp_path / "extmods"
        directory.mkdir()
        monkeypatch.syspath_prepend(str(directory))
        return directory

    def test_single_and_many(self, module_dir: Path) -> None:
        (module_dir / "rc_single_ext.py").write_text(
            textwrap.dedent(
                """
                from restcache.extensions import Extension

                extension = Extension(path="/one", handle=lambda request: 1)
                """
            )
        )
        (module_dir / "rc_many_ext.py").write_text(
            textwrap.dedent(
                """
                from restcache.extensions import Extension

                extensions = [
                    Extension(path="/two", handle=lambda request: 2),
                    Extension(path="/three", handle=lambda request: 3),
                    "not an extension",
                ]
                """
            )
        )
        registry = ExtensionRegistry()

        count = registry.load_from_module_paths(["rc_single_ext", "rc_many_ext"])

        assert count == 3
        assert [e.path for e in registry.list_extensions()] == ["/one", "/two", "/three"]

    def test_bad_modules_are_skipped(self, module_dir: Path) -> None:
        (module_dir / "rc_empty_ext.py").write_text("VALUE = 1\n")
        (module_dir / "rc_broken_ext.py").write_text("raise RuntimeError('nope')\n")
        registry = ExtensionRegistry()

        count = registry.load_from_module_paths(
            ["rc_empty_ext", "rc_broken_ext", "rc_does_not_exist"]
        )

        assert count == 0
        assert len(registry) == 0
