"""Sibling package discovery and metadata loading.

Every immediate subdirectory of the base directory is one package. Its
``doc.json`` is mandatory; its previously written ``package.json`` is
optional and only supplies the prior version and gitHead.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from versioning.errors import InvalidVersionError, MetadataReadError
from versioning.models import LoadedPackage, PackageMetadata
from versioning.revision import next_revision, package_version
from versioning.version_index import VersionIndex

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def list_package_dirs(base_dir: str) -> List[str]:
    """Return the sorted names of the immediate subdirectories of base_dir.

    Raises:
        MetadataReadError: If base_dir cannot be listed.
    """
    try:
        with os.scandir(base_dir) as entries:
            return sorted(entry.name for entry in entries if entry.is_dir())
    except OSError as exc:
        raise MetadataReadError(base_dir, str(exc)) from exc


async def read_metadata(directory: str, slug: str) -> PackageMetadata:
    """Read and validate the required doc.json of a package.

    Raises:
        MetadataReadError: If the file is missing, not JSON, or lacks a name.
    """
    path = os.path.join(directory, slug, Constants.METADATA_FILE)
    try:
        data = await asyncio.to_thread(_read_json, path)
    except (OSError, ValueError) as exc:
        raise MetadataReadError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise MetadataReadError(path, "top level is not an object")
    try:
        return PackageMetadata.from_dict(data, slug)
    except (KeyError, TypeError) as exc:
        raise MetadataReadError(path, f"invalid metadata: {exc}") from exc


async def read_prior_manifest(directory: str, slug: str) -> Optional[Dict[str, Any]]:
    """Read the previously generated package.json, or None if unavailable."""
    path = os.path.join(directory, slug, Constants.PACKAGE_JSON_FILE)
    try:
        data = await asyncio.to_thread(_read_json, path)
    except (OSError, ValueError) as exc:
        logger.debug("No prior manifest for %s: %s", slug, exc)
        return None
    if not isinstance(data, dict):
        logger.debug("Ignoring prior manifest for %s: not an object", slug)
        return None
    return data


async def load_package(
    directory: str, slug: str, index: VersionIndex, increment: bool
) -> LoadedPackage:
    """Load one sibling package, compute its version and register it."""
    meta = await read_metadata(directory, slug)
    prior = await read_prior_manifest(directory, slug)

    prior_version = prior.get("version") if prior else None
    git_head = prior.get("gitHead") if prior else None
    if prior_version is not None and not isinstance(prior_version, str):
        prior_version = None

    revision = next_revision(prior_version, increment)
    if increment and prior_version and revision:
        logger.info(
            "%s has received a local patch upgrade, incrementing the version from %s",
            meta.name,
            prior_version,
        )
    try:
        version = package_version(meta, revision)
    except InvalidVersionError as exc:
        logger.warning("Skipping %s: %s", slug, exc)
        return LoadedPackage(
            directory=directory,
            slug=slug,
            meta=meta,
            git_head=git_head,
            version=None,
            error=exc,
        )
    index.register(meta.name, meta.api_version, version)

    if is_debug_enabled(logger):
        logger.debug(
            "Loaded package",
            extra=extra_context(
                event="load",
                component="loader",
                action="load_package",
                package=slug,
                version=version,
                prior_version=prior_version,
            ),
        )

    return LoadedPackage(
        directory=directory,
        slug=slug,
        meta=meta,
        git_head=git_head,
        version=version,
    )


async def load_packages(
    base_dir: str, increment: bool, index: Optional[VersionIndex] = None
) -> Tuple[List[LoadedPackage], VersionIndex]:
    """Load every sibling package under base_dir concurrently.

    Any metadata failure propagates and aborts the run. A package whose
    version cannot be computed is returned with its error set and is not
    registered in the index.
    """
    index = index if index is not None else VersionIndex()
    slugs = list_package_dirs(base_dir)
    logger.info("Loading %d packages from %s", len(slugs), base_dir)
    packages = await asyncio.gather(
        *(load_package(base_dir, slug, index, increment) for slug in slugs)
    )
    return list(packages), index
