"""Best-effort registry fallback for imports with no local sibling package."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

from constants import Constants
from versioning.errors import RegistryLookupError
from versioning.models import RegistryLookup
from versioning.revision import major_of

logger = logging.getLogger(__name__)


class RegistryFallbackResolver:
    """Look up published versions of ``@gi-types`` packages on npm.

    ``resolve`` never raises: every failure is logged and reported as a
    NOT_FOUND lookup. Lookups are memoized per (identifier, tag) for the
    lifetime of the resolver, which is one run.
    """

    def __init__(self, client, prefix: Optional[str] = None):
        self._client = client
        self._prefix = prefix or Constants.PACKAGE_PREFIX
        self._pending: Dict[Tuple[str, str], "asyncio.Future[RegistryLookup]"] = {}

    def identifier_for(self, name: str, major_version: str) -> str:
        """Registry identifier, e.g. ("Gtk", "4.0") -> "@gi-types/gtk4"."""
        return f"{self._prefix}/{name.lower()}{major_of(major_version)}"

    async def resolve(self, name: str, major_version: str, tag: str) -> RegistryLookup:
        """Resolve the version published under ``tag`` for a library/major pair."""
        identifier = self.identifier_for(name, major_version)
        key = (identifier, tag)
        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._lookup(name, identifier, tag))
            self._pending[key] = pending
        return await pending

    async def _lookup(self, name: str, identifier: str, tag: str) -> RegistryLookup:
        logger.info("No versions for %s (%s), checking npm...", name, identifier)
        try:
            document = await self._client.fetch_dist_tag(identifier, tag)
        except RegistryLookupError as exc:
            logger.warning("No version on npm found for %s: %s", identifier, exc)
            return RegistryLookup.not_found(identifier)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Error occurred looking up %s on npm", identifier)
            return RegistryLookup.not_found(identifier)

        version = document.get("version")
        if not isinstance(version, str) or not version:
            logger.warning("Malformed registry document for %s: missing version", identifier)
            return RegistryLookup.not_found(identifier)

        logger.info("Found version: %s from npm.", version)
        return RegistryLookup.found(identifier, version)
