"""Tests for import resolution against the version index and the registry."""

import asyncio

import pytest

from manifest.dependencies import DependencyResolver, partition
from versioning.errors import UnresolvedDependencyError
from versioning.models import PackageMetadata, RegistryLookup, ResolvedDependency
from versioning.version_index import VersionIndex


class _StubFallback:
    """Fallback resolver stub with fixed versions per library name."""

    def __init__(self, versions=None):
        self.versions = versions or {}
        self.calls = []

    async def resolve(self, name, major_version, tag):
        self.calls.append((name, major_version, tag))
        identifier = f"@gi-types/{name.lower()}{major_version.split('.')[0]}"
        if name in self.versions:
            return RegistryLookup.found(identifier, self.versions[name])
        return RegistryLookup.not_found(identifier)


def make_meta(name, imports):
    return PackageMetadata(
        name=name, api_version="1.0", package_version="1.0.0", imports=imports, slug=name.lower()
    )


@pytest.fixture
def index():
    idx = VersionIndex()
    idx.register("B", "2.0", "2.3.1")
    idx.register("GObject", "2.0", "2.66.0")
    idx.register("Gdk", "4.0", "4.0.2")
    idx.register("Gdk", "3.0", "3.24.0")
    return idx


class TestVersionIndex:
    """Tests for VersionIndex."""

    def test_register_and_get(self, index):
        assert index.get("B", "2.0") == "2.3.1"
        assert index.get("B", "3.0") is None
        assert index.get("Nope", "1.0") is None

    def test_distinct_majors_are_independent(self, index):
        assert index.lookup("Gdk") == {"4.0": "4.0.2", "3.0": "3.24.0"}

    def test_as_dict_is_sorted(self, index):
        snapshot = index.as_dict()
        assert list(snapshot) == ["B", "GObject", "Gdk"]
        assert list(snapshot["Gdk"]) == ["3.0", "4.0"]


class TestDependencyResolver:
    """Tests for DependencyResolver."""

    def test_local_sibling_resolves_to_caret_range(self, index):
        resolver = DependencyResolver(index, _StubFallback())
        deps, peers = asyncio.run(resolver.resolve(make_meta("A", {"B": "2.0"}), "latest"))
        assert deps == {"@gi-types/b2": "^2.3.1"}
        assert peers == {}

    def test_keys_sorted_regardless_of_declaration_order(self, index):
        resolver = DependencyResolver(index, _StubFallback())
        meta = make_meta("Gtk", {"GObject": "2.0", "Gdk": "4.0", "B": "2.0"})
        deps, _ = asyncio.run(resolver.resolve(meta, "latest"))
        assert list(deps) == ["@gi-types/b2", "@gi-types/gdk4", "@gi-types/gobject2"]

    def test_registry_fallback_used_on_index_miss(self, index):
        fallback = _StubFallback({"GLib": "2.66.3"})
        resolver = DependencyResolver(index, fallback)
        deps, _ = asyncio.run(resolver.resolve(make_meta("A", {"GLib": "2.0"}), "next"))
        assert deps == {"@gi-types/glib2": "^2.66.3"}
        assert fallback.calls == [("GLib", "2.0", "next")]

    def test_registry_not_consulted_when_name_is_indexed(self, index):
        fallback = _StubFallback({"Gdk": "9.9.9"})
        resolver = DependencyResolver(index, fallback)
        with pytest.raises(UnresolvedDependencyError):
            asyncio.run(resolver.resolve(make_meta("A", {"Gdk": "5.0"}), "latest"))
        assert fallback.calls == []

    def test_unresolved_import_raises_with_import_names(self, index):
        resolver = DependencyResolver(index, _StubFallback())
        meta = make_meta("A", {"C": "1.0", "B": "2.0", "Atk": "1.0"})
        with pytest.raises(UnresolvedDependencyError) as excinfo:
            asyncio.run(resolver.resolve(meta, "latest"))
        assert excinfo.value.package == "A"
        assert excinfo.value.missing == ["Atk", "C"]

    def test_registry_disabled(self, index):
        fallback = _StubFallback({"GLib": "2.66.3"})
        resolver = DependencyResolver(index, fallback, use_registry=False)
        with pytest.raises(UnresolvedDependencyError) as excinfo:
            asyncio.run(resolver.resolve(make_meta("A", {"GLib": "2.0"}), "latest"))
        assert excinfo.value.missing == ["GLib"]
        assert fallback.calls == []

    def test_peer_marker_has_no_major_suffix(self, index):
        resolver = DependencyResolver(index, _StubFallback())
        dep = asyncio.run(resolver.resolve_import("Pango", "1.0", "latest"))
        assert dep == ResolvedDependency("Pango", "@gi-types/pango", "*")
        assert dep.is_peer

    def test_no_imports(self, index):
        resolver = DependencyResolver(index, None)
        assert asyncio.run(resolver.resolve(make_meta("A", {}), "latest")) == ({}, {})

    def test_index_is_read_at_resolution_time(self):
        idx = VersionIndex()
        resolver = DependencyResolver(idx, None, use_registry=False)
        idx.register("Late", "1.0", "1.0.4")
        deps, _ = asyncio.run(resolver.resolve(make_meta("A", {"Late": "1.0"}), "latest"))
        assert deps == {"@gi-types/late1": "^1.0.4"}


def test_partition_separates_peers():
    deps, peers = partition(
        [
            ResolvedDependency("Z", "@gi-types/z1", "^1.0.0"),
            ResolvedDependency("Y", "@gi-types/y", "*"),
            ResolvedDependency("A", "@gi-types/a1", "^1.2.0"),
        ]
    )
    assert list(deps.items()) == [("@gi-types/a1", "^1.2.0"), ("@gi-types/z1", "^1.0.0")]
    assert peers == {"@gi-types/y": "*"}
