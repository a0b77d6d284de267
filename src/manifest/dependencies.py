"""Resolution of declared imports into dependency version ranges."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from constants import Constants
from registry.npm.fallback import RegistryFallbackResolver
from versioning.errors import UnresolvedDependencyError
from versioning.models import PEER_RANGE, PackageMetadata, ResolvedDependency
from versioning.revision import major_of
from versioning.version_index import VersionIndex

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Resolve imports against the version index, falling back to the registry.

    Args:
        index: Version index of the current run.
        fallback: Registry fallback resolver; may be None when use_registry is False.
        prefix: Package scope prefix.
        use_registry: Consult the registry when the index has no entry.
    """

    def __init__(
        self,
        index: VersionIndex,
        fallback: Optional[RegistryFallbackResolver] = None,
        prefix: Optional[str] = None,
        use_registry: bool = True,
    ):
        self._index = index
        self._fallback = fallback
        self._prefix = prefix or Constants.PACKAGE_PREFIX
        self._use_registry = use_registry and fallback is not None

    async def latest_version(self, name: str, api_version: str, tag: str) -> Optional[str]:
        """Version for an imported library, from the index or the registry."""
        versions = self._index.lookup(name)
        if versions is not None:
            return versions.get(api_version)
        if not self._use_registry:
            return None
        lookup = await self._fallback.resolve(name, api_version, tag)
        return lookup.version if lookup.is_found else None

    async def resolve_import(self, import_name: str, api_version: str, tag: str) -> ResolvedDependency:
        version = await self.latest_version(import_name, api_version, tag)
        base = f"{self._prefix}/{import_name.lower()}"
        if version:
            return ResolvedDependency(import_name, f"{base}{major_of(api_version)}", f"^{version}")
        return ResolvedDependency(import_name, base, PEER_RANGE)

    async def resolve_all(self, meta: PackageMetadata, tag: str) -> List[ResolvedDependency]:
        """Resolve every import of a package concurrently."""
        return list(
            await asyncio.gather(
                *(
                    self.resolve_import(name, api_version, tag)
                    for name, api_version in meta.imports.items()
                )
            )
        )

    async def resolve(self, meta: PackageMetadata, tag: str) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Return sorted (dependencies, peers) maps for a package.

        Raises:
            UnresolvedDependencyError: If any import resolved to a peer marker.
        """
        resolved = await self.resolve_all(meta, tag)
        dependencies, peers = partition(resolved)
        if peers:
            missing = sorted(dep.import_name for dep in resolved if dep.is_peer)
            raise UnresolvedDependencyError(meta.name, missing)
        return dependencies, peers


def partition(resolved: List[ResolvedDependency]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Split resolved entries into dependency and peer maps sorted by name."""
    dependencies = sorted((d.name, d.range) for d in resolved if not d.is_peer)
    peers = sorted((d.name, d.range) for d in resolved if d.is_peer)
    return dict(dependencies), dict(peers)
