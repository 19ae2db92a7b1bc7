# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Integration tests for the HTTP command interface."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from restcache.api.app import create_app
from restcache.core.config import Settings
from restcache.extensions import Extension
from restcache.gateway.results import BatchResult, ItemResult


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# 1. Basic commands over GET and POST
# ---------------------------------------------------------------------------
class TestCommands:
    async def test_ping(self, client) -> None:
        resp = await client.get("/ping")
        assert resp.status_code == 200
        assert resp.json() == {"errors": [], "response": ["PONG"]}

    async def test_set_and_get_via_query(self, client) -> None:
        resp = await client.get("/set?a=1&b=2")
        assert resp.json() == {"errors": [], "response": [True, True]}

        resp = await client.get("/get?a&b&c")
        assert resp.json() == {"errors": [], "response": ["1", "2", None]}

    async def test_set_via_json(self, client, app) -> None:
        resp = await client.post("/set", json={"n": 5, "s": "text", "obj": {"x": [1, 2]}})
        assert resp.json()["response"] == [True, True, True]
        assert app.state.store.snapshot() == {"n": 5, "s": "text", "obj": {"x": [1, 2]}}

    async def test_set_via_form(self, client, app) -> None:
        resp = await client.post("/set", data={"a": "1", "b": "2"})
        assert resp.json() == {"errors": [], "response": [True, True]}
        assert app.state.store.get("b") == "2"

    async def test_body_overrides_query(self, client, app) -> None:
        resp = await client.post("/set?x=1&a=query", json={"a": "body", "y": "2"})
        assert resp.json()["response"] == [True, True, True]
        assert app.state.store.keys() == ["x", "a", "y"]
        assert app.state.store.get("a") == "body"

    async def test_incr_with_partial_failure(self, client) -> None:
        await client.get("/set?x=5")
        resp = await client.get("/incr?x=2&y=abc&z")
        data = resp.json()
        assert data["response"] == [7, 1]
        assert [e["index"] for e in data["errors"]] == [1]

    async def test_keys_and_del(self, client) -> None:
        await client.post("/set", json={"a": "1", "b": "2"})
        resp = await client.get("/keys")
        assert sorted(resp.json()["response"]) == ["a", "b"]

        await client.get("/del?a")
        resp = await client.get("/keys")
        assert resp.json()["response"] == ["b"]

    async def test_random_on_empty_cache(self, client) -> None:
        resp = await client.get("/random")
        assert resp.json() == {"errors": [], "response": []}

    async def test_dump_and_flush(self, client) -> None:
        await client.get("/set?a=1")
        resp = await client.get("/dump")
        assert resp.json()["response"] == [{"a": "1"}]

        resp = await client.post("/flush")
        assert resp.json()["response"] == [True]
        resp = await client.get("/dump")
        assert resp.json()["response"] == [{}]

    async def test_stats(self, client) -> None:
        resp = await client.get("/stats")
        (stats,) = resp.json()["response"]
        assert stats["cache"]["keyCount"] == 0
        assert "versions" in stats

    async def test_unknown_route(self, client) -> None:
        resp = await client.get("/teleport")
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 2. Expiry over HTTP
# ---------------------------------------------------------------------------
class TestExpiry:
    async def test_expire_and_unexpire(self, client, app) -> None:
        await client.get("/set?a=1&b=2")
        resp = await client.get("/expire?a=60000&b=soon")
        data = resp.json()
        assert data["response"] == [True]
        assert data["errors"][0]["index"] == 1
        assert app.state.store.has_expiry("a")

        await client.get("/unexpire?a")
        assert app.state.store.has_expiry("a") is False


# ---------------------------------------------------------------------------
# 3. Request errors
# ---------------------------------------------------------------------------
class TestRequestErrors:
    async def test_invalid_json(self, client) -> None:
        resp = await client.post(
            "/set", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "errors": [{"message": "Request body is not valid JSON.", "index": None}],
            "response": [],
        }

    async def test_json_array_body(self, client) -> None:
        resp = await client.post("/set", json=["a", "b"])
        assert resp.json()["errors"][0]["index"] is None

    async def test_request_id_header(self, client) -> None:
        resp = await client.get("/ping", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"
        assert "X-Response-Time-Ms" in resp.headers


# ---------------------------------------------------------------------------
# 4. Command gating and backups
# ---------------------------------------------------------------------------
class TestBackups:
    async def test_backup_disabled_by_default(self, backup_dir: Path) -> None:
        app = create_app(Settings(backup_directory=backup_dir, backup_automatic=False))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/backup")
            restore = await ac.get("/restore?whatever.rc.bak")

        assert resp.json() == {
            "errors": [{"message": "BACKUP is not enabled.", "index": None}],
            "response": [],
        }
        assert restore.json()["errors"][0]["message"] == "RESTORE is not enabled."
        assert list(backup_dir.iterdir()) == []

    async def test_backup_restore_roundtrip(self, client, app, backup_dir: Path) -> None:
        await client.get("/set?a=1")
        resp = await client.post("/backup")
        (name,) = resp.json()["response"]
        assert (backup_dir / name).is_file()

        await client.get("/flush")
        resp = await client.get(f"/restore?{name}")
        assert resp.json() == {"errors": [], "response": [True]}
        assert app.state.store.get("a") == "1"

        resp = await client.get(f"/dump?{name}")
        assert resp.json()["response"] == [{"a": "1"}]

    async def test_restore_missing(self, client) -> None:
        resp = await client.get("/restore?missing.rc.bak")
        data = resp.json()
        assert data["response"] == []
        assert data["errors"] == [{"message": "Unable to load backup missing.rc.bak", "index": 0}]

    async def test_stats_lists_backups(self, client, write_backup) -> None:
        write_backup("x.rc.bak", {}, mtime=1_000)
        resp = await client.get("/stats")
        (stats,) = resp.json()["response"]
        assert stats["backups"] == [{"name": "x.rc.bak", "lastModified": 1_000_000}]


# ---------------------------------------------------------------------------
# 5. Extensions
# ---------------------------------------------------------------------------
class TestExtensions:
    async def test_custom_route(self, settings: Settings) -> None:
        def count(request):
            return len(request.gateway.store.keys())

        app = create_app(settings, extensions=[Extension(path="/count", handle=count)])
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            await ac.get("/set?a=1&b=2")
            resp = await ac.get("/count")

        assert resp.json() == {"errors": [], "response": [2]}

    async def test_async_handler_sees_params(self, settings: Settings) -> None:
        async def echo(request):
            return BatchResult.from_results(
                [ItemResult.ok(key, index=i) for i, (key, _) in enumerate(request.params)]
            )

        app = create_app(settings, extensions=[Extension(path="/echo", handle=echo)])
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.post("/echo?first=1", json={"second": 2})

        assert resp.json()["response"] == ["first", "second"]

    async def test_extension_replaces_builtin(self, settings: Settings) -> None:
        app = create_app(settings, extensions=[Extension(path="/ping", handle=lambda r: "custom")])
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/ping")

        assert resp.json()["response"] == ["custom"]

    async def test_failing_extension(self, settings: Settings) -> None:
        def broken(request):
            raise RuntimeError("nope")

        app = create_app(settings, extensions=[Extension(path="/broken", handle=broken)])
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/broken")

        assert resp.status_code == 200
        assert resp.json() == {
            "errors": [{"message": "Extension /broken failed: nope", "index": None}],
            "response": [],
        }

    async def test_extensions_disabled(self, backup_dir: Path) -> None:
        settings = Settings(backup_directory=backup_dir, extensions_enabled=False)
        app = create_app(settings, extensions=[Extension(path="/count", handle=lambda r: 1)])
        assert len(app.state.extensions) == 0


# ---------------------------------------------------------------------------
# 6. Lifespan
# ---------------------------------------------------------------------------
class TestLifespan:
    async def test_startup_restores_newest_backup(self, backup_dir: Path, write_backup) -> None:
        write_backup("old.rc.bak", {"v": "old"}, mtime=1_000)
        write_backup("new.rc.bak", {"v": "new"}, mtime=2_000)
        app = create_app(
            Settings(
                backup_directory=backup_dir,
                backup_automatic=False,
                backup_load_on_startup=True,
            )
        )

        async with app.router.lifespan_context(app):
            assert app.state.store.get("v") == "new"

        assert app.state.store.size() == 0

    async def test_automatic_backups_run_while_serving(self, backup_dir: Path) -> None:
        app = create_app(
            Settings(
                backup_directory=backup_dir,
                backup_automatic=True,
                backup_interval_ms=20,
                backup_load_on_startup=False,
            )
        )

        async with app.router.lifespan_context(app):
            assert app.state.backups.running
            app.state.store.set("k", "v")
            await asyncio.sleep(0.1)

        assert app.state.backups.running is False
        assert len(app.state.backups.get_backups()) >= 1
