"""Tests for the npm registry client and the best-effort fallback resolver."""

import asyncio

import pytest

aiohttp_mod = pytest.importorskip("aiohttp")

from registry.npm import NpmRegistryClient, RegistryFallbackResolver
from versioning.errors import RegistryLookupError
from versioning.models import LookupStatus


class _DummyResponse:
    def __init__(self, status, text=""):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _DummySession:
    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error
        self.urls = []
        self.closed = False

    def get(self, url):
        self.urls.append(url)
        if self._error is not None:
            raise self._error
        return self._response

    async def close(self):
        self.closed = True


class _FakeClient:
    """Registry client stub returning canned documents per identifier."""

    def __init__(self, documents=None, error=None):
        self.documents = documents or {}
        self.error = error
        self.calls = []

    async def fetch_dist_tag(self, identifier, tag):
        self.calls.append((identifier, tag))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        if identifier not in self.documents:
            raise RegistryLookupError(f"{identifier}@{tag}: not found")
        return self.documents[identifier]


class TestNpmRegistryClient:
    """Tests for NpmRegistryClient."""

    def test_build_url_quotes_scoped_name(self):
        client = NpmRegistryClient(base_url="https://registry.example.org/")
        url = client.build_url("@gi-types/gtk4", "latest")
        assert url == "https://registry.example.org/@gi-types%2Fgtk4/latest"

    def test_fetch_returns_document(self):
        client = NpmRegistryClient(base_url="https://registry.example.org")
        session = _DummySession(_DummyResponse(200, '{"name": "@gi-types/gtk4", "version": "4.0.5"}'))
        client._session = session

        data = asyncio.run(client.fetch_dist_tag("@gi-types/gtk4", "latest"))

        assert data["version"] == "4.0.5"
        assert session.urls == ["https://registry.example.org/@gi-types%2Fgtk4/latest"]

    def test_fetch_not_found_raises(self):
        client = NpmRegistryClient()
        client._session = _DummySession(_DummyResponse(404, '"Not Found"'))
        with pytest.raises(RegistryLookupError):
            asyncio.run(client.fetch_dist_tag("@gi-types/missing1", "latest"))

    def test_fetch_invalid_json_raises(self):
        client = NpmRegistryClient()
        client._session = _DummySession(_DummyResponse(200, "<html>"))
        with pytest.raises(RegistryLookupError):
            asyncio.run(client.fetch_dist_tag("@gi-types/gtk4", "latest"))

    def test_fetch_non_object_raises(self):
        client = NpmRegistryClient()
        client._session = _DummySession(_DummyResponse(200, '["4.0.0"]'))
        with pytest.raises(RegistryLookupError):
            asyncio.run(client.fetch_dist_tag("@gi-types/gtk4", "latest"))

    def test_transport_error_raises_lookup_error(self):
        client = NpmRegistryClient()
        client._session = _DummySession(error=aiohttp_mod.ClientConnectionError("boom"))
        with pytest.raises(RegistryLookupError):
            asyncio.run(client.fetch_dist_tag("@gi-types/gtk4", "latest"))

    def test_fetch_starts_session_when_missing(self, monkeypatch):
        client = NpmRegistryClient()
        session = _DummySession(_DummyResponse(200, '{"version": "1.0.0"}'))

        async def _start():
            client._session = session

        monkeypatch.setattr(client, "start", _start)

        data = asyncio.run(client.fetch_dist_tag("@gi-types/gtk4", "latest"))

        assert data == {"version": "1.0.0"}
        assert len(session.urls) == 1

    def test_stop_closes_session(self):
        client = NpmRegistryClient()
        session = _DummySession()
        client._session = session
        asyncio.run(client.stop())
        assert session.closed is True
        assert client._session is None


class TestRegistryFallbackResolver:
    """Tests for RegistryFallbackResolver."""

    def test_identifier_lowercases_and_appends_major(self):
        resolver = RegistryFallbackResolver(_FakeClient())
        assert resolver.identifier_for("GObject", "2.0") == "@gi-types/gobject2"
        assert resolver.identifier_for("Gtk", "4") == "@gi-types/gtk4"

    def test_found(self):
        client = _FakeClient({"@gi-types/glib2": {"version": "2.66.3"}})
        resolver = RegistryFallbackResolver(client)

        result = asyncio.run(resolver.resolve("GLib", "2.0", "next"))

        assert result.status is LookupStatus.FOUND
        assert result.version == "2.66.3"
        assert client.calls == [("@gi-types/glib2", "next")]

    def test_not_found_does_not_raise(self):
        resolver = RegistryFallbackResolver(_FakeClient())
        result = asyncio.run(resolver.resolve("Missing", "1.0", "latest"))
        assert result.status is LookupStatus.NOT_FOUND
        assert result.version is None

    def test_unexpected_error_does_not_raise(self):
        resolver = RegistryFallbackResolver(_FakeClient(error=RuntimeError("kaboom")))
        result = asyncio.run(resolver.resolve("GLib", "2.0", "latest"))
        assert result.is_found is False

    def test_document_without_version_is_not_found(self):
        client = _FakeClient({"@gi-types/glib2": {"name": "@gi-types/glib2"}})
        resolver = RegistryFallbackResolver(client)
        result = asyncio.run(resolver.resolve("GLib", "2.0", "latest"))
        assert result.is_found is False

    def test_concurrent_lookups_are_memoized(self):
        client = _FakeClient({"@gi-types/glib2": {"version": "2.66.3"}})
        resolver = RegistryFallbackResolver(client)

        async def _run():
            return await asyncio.gather(
                resolver.resolve("GLib", "2.0", "latest"),
                resolver.resolve("GLib", "2.0", "latest"),
                resolver.resolve("GLib", "2.0", "next"),
            )

        results = asyncio.run(_run())

        assert [r.version for r in results] == ["2.66.3", "2.66.3", "2.66.3"]
        assert sorted(client.calls) == [("@gi-types/glib2", "latest"), ("@gi-types/glib2", "next")]
