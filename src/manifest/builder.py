"""Manifest (package.json) construction."""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from constants import Constants
from versioning.models import PackageMetadata
from versioning.revision import major_of


def package_name(meta: PackageMetadata, version: str, prefix: Optional[str] = None) -> str:
    """Published name: prefix + lower-cased library name + major version."""
    return f"{prefix or Constants.PACKAGE_PREFIX}/{meta.name.lower()}{major_of(version)}"


def repository_url(repository_path: str) -> str:
    return Constants.REPOSITORY_URL_TEMPLATE.format(
        owner=Constants.REPOSITORY_OWNER, path=repository_path
    )


def build_manifest(
    meta: PackageMetadata,
    version: str,
    dependencies: Optional[Dict[str, str]],
    peers: Optional[Dict[str, str]],
    git_head: Optional[str],
    tag: str,
    repository_path: str,
    private: bool = False,
    prefix: Optional[str] = None,
) -> Dict[str, Any]:
    """Assemble the manifest for one package.

    Pure data transformation; key order is the order written to disk.
    Empty dependency maps are omitted, as is gitHead when there is none.
    """
    prefix = prefix or Constants.PACKAGE_PREFIX
    manifest: Dict[str, Any] = {"name": package_name(meta, version, prefix)}
    if private:
        manifest["private"] = True
    else:
        manifest["publishConfig"] = {"access": "public", "tag": tag}

    manifest.update(
        {
            "version": version,
            "description": f"TypeScript definitions for {meta.name}",
            "license": Constants.LICENSE,
            "contributors": copy.deepcopy(Constants.CONTRIBUTORS),
            "main": "",
            "files": list(Constants.MANIFEST_FILES),
            "types": Constants.TYPES_ENTRY,
            "repository": {
                "type": "git",
                "url": repository_url(repository_path),
                "directory": f"packages/{prefix}/{meta.slug}",
            },
            "scripts": {},
        }
    )
    if dependencies:
        manifest["dependencies"] = dict(sorted(dependencies.items()))
    if peers:
        manifest["peerDependencies"] = dict(sorted(peers.items()))
    manifest["typeScriptVersion"] = Constants.TYPESCRIPT_VERSION
    if git_head is not None:
        manifest["gitHead"] = git_head
    return manifest
