"""Published version computation for generated packages.

The published version keeps the upstream major.minor and replaces the
patch component with a revision counter tracked by the builder, so
upstream patch churn never leaks into published versions.
"""

import logging
import re
from typing import Optional

import semantic_version

from versioning.errors import InvalidVersionError
from versioning.models import PackageMetadata

logger = logging.getLogger(__name__)

_COERCE_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(raw: Optional[str]) -> Optional[semantic_version.Version]:
    """Parse strictly, falling back to coercion of the first numeric run.

    Returns None when the string has no recognizable version.
    """
    if not raw:
        return None
    raw = raw.strip()
    try:
        return semantic_version.Version(raw)
    except ValueError:
        pass
    match = _COERCE_RE.search(raw)
    if not match:
        return None
    try:
        return semantic_version.Version.coerce(match.group(0))
    except ValueError:
        return None


def package_version(meta: PackageMetadata, revision: int) -> str:
    """Return the canonical version for a package with the given revision.

    Args:
        meta: Upstream metadata; ``package_version`` seeds the version and
            ``api_version`` is used when it is empty.
        revision: Non-negative patch number to assign.

    Raises:
        InvalidVersionError: If neither parsing nor coercion succeeds.
    """
    if revision < 0:
        raise ValueError(f"revision must be non-negative, got {revision}")
    raw = meta.package_version or meta.api_version
    sem = parse_version(raw)
    if sem is None:
        raise InvalidVersionError(meta.name, raw)
    version = semantic_version.Version(
        major=sem.major,
        minor=sem.minor,
        patch=revision,
        prerelease=sem.prerelease,
    )
    return str(version)


def prior_patch(prior_version: Optional[str]) -> Optional[int]:
    """Patch component of a previously published version, if usable."""
    if not prior_version:
        return None
    try:
        return semantic_version.Version(prior_version.strip()).patch
    except ValueError:
        logger.warning("Ignoring unparseable published version %r", prior_version)
        return None


def next_revision(prior_version: Optional[str], increment: bool) -> int:
    """Revision to assign given the prior published version.

    0 on first publish, otherwise the prior patch, bumped by one when the
    local-patch-upgrade flag is set.
    """
    patch = prior_patch(prior_version)
    if patch is None:
        return 0
    if increment:
        return patch + 1
    return patch


def major_of(version: str) -> str:
    """Leading numeral of a dotted version string ("2.4" -> "2")."""
    return str(version).split(".", 1)[0]
