"""Run orchestration: load, resolve, build and write every package.

Loading is all-or-nothing. After that, each package runs its own
pipeline and a failure in one never affects the others; the run result
is a tally of per-package outcomes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from manifest.builder import build_manifest
from manifest.dependencies import DependencyResolver
from manifest.license import LICENSE
from manifest.loader import load_packages
from manifest.readme import create_readme
from manifest.writer import write_package_files
from registry.npm import NpmRegistryClient, RegistryFallbackResolver
from versioning.models import LoadedPackage, PackageOutcome, RunSummary

logger = logging.getLogger(__name__)


async def build_package(
    package: LoadedPackage,
    resolver: DependencyResolver,
    tag: str,
    repository_path: str,
    private: bool = False,
    write: bool = True,
) -> Dict[str, Any]:
    """Resolve, build and (optionally) write the manifest for one package."""
    if package.error is not None:
        raise package.error
    meta = package.meta
    dependencies, peers = await resolver.resolve(meta, tag)
    manifest = build_manifest(
        meta,
        package.version,
        dependencies,
        peers,
        package.git_head,
        tag,
        repository_path,
        private=private,
    )
    if write:
        readme = create_readme(meta.name, meta.api_version, meta.package_version or meta.api_version)
        await write_package_files(os.path.join(package.directory, package.slug), manifest, LICENSE, readme)
    return manifest


async def print_packages(
    packages: List[LoadedPackage],
    resolver: DependencyResolver,
    tag: str,
    repository_path: str,
    private: bool = False,
    write: bool = True,
) -> List[PackageOutcome]:
    """Run every package pipeline concurrently and collect tagged outcomes."""
    results = await asyncio.gather(
        *(
            build_package(package, resolver, tag, repository_path, private=private, write=write)
            for package in packages
        ),
        return_exceptions=True,
    )
    outcomes = []
    for package, result in zip(packages, results):
        if isinstance(result, Exception):
            logger.debug("Package %s failed: %s", package.slug, result)
            outcomes.append(PackageOutcome(slug=package.slug, error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(PackageOutcome(slug=package.slug, manifest=result))
    return outcomes


async def build_packages(
    base_dir: str,
    repository_path: str,
    tag: str = Constants.DEFAULT_TAG,
    increment: bool = True,
    private: bool = False,
    use_registry: bool = True,
    write: bool = True,
    client: Optional[Any] = None,
) -> RunSummary:
    """Generate manifests for every sibling package under base_dir.

    Args:
        base_dir: Directory holding one subdirectory per package.
        repository_path: Group path used for the repository URL.
        tag: npm dist-tag for publishConfig and registry lookups.
        increment: Bump the patch of packages that were published before.
        private: Emit ``private: true`` instead of a publish config.
        use_registry: Fall back to the npm registry for unknown imports.
        write: Write files to disk; False only builds manifests.
        client: Registry client to use; a new NpmRegistryClient by default.

    Raises:
        MetadataReadError: If any package metadata cannot be read.
    """
    logger.info("Generating packages for %s and prefix %s.", base_dir, repository_path)
    packages, index = await load_packages(base_dir, increment)

    owns_client = client is None and use_registry
    if owns_client:
        client = NpmRegistryClient()
    try:
        fallback = RegistryFallbackResolver(client) if use_registry else None
        resolver = DependencyResolver(index, fallback, use_registry=use_registry)
        outcomes = await print_packages(
            packages, resolver, tag, repository_path, private=private, write=write
        )
    finally:
        if owns_client:
            await client.stop()

    summary = RunSummary.from_outcomes(outcomes, index.as_dict())
    if is_debug_enabled(logger):
        logger.debug(
            "Run finished",
            extra=extra_context(
                event="function_exit",
                component="pipeline",
                action="build_packages",
                succeeded=summary.success_count,
                failed=summary.failure_count,
            ),
        )
    return summary


def format_summary(summary: RunSummary) -> str:
    """Human-readable run report."""
    lines = [
        f"Successfully generated {summary.success_count} packages, "
        f"{summary.failure_count} packages failed.",
        "Failures:",
    ]
    lines.extend(f"{slug}: {reason}" for slug, reason in sorted(summary.failures.items()))
    lines.append("Versions:")
    lines.append(json.dumps(summary.versions, indent=2))
    return "\n".join(lines)
