"""Data models for package metadata, resolution results and run outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional


PEER_RANGE = "*"


@dataclass(frozen=True)
class PackageMetadata:
    """Upstream descriptor for one sibling package (read from doc.json)."""
    name: str
    api_version: str
    package_version: Optional[str]
    imports: Mapping[str, str]
    slug: str

    def __post_init__(self):
        # Freeze the imports mapping so loaded metadata stays immutable.
        object.__setattr__(self, "imports", MappingProxyType(dict(self.imports)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], slug: str) -> "PackageMetadata":
        """Build metadata from a decoded doc.json mapping.

        Raises:
            KeyError: If the required ``name`` key is missing.
            TypeError: If ``imports`` is not a mapping.
        """
        imports = data.get("imports") or {}
        if not isinstance(imports, dict):
            raise TypeError(f"'imports' must be an object, got {type(imports).__name__}")
        return cls(
            name=data["name"],
            api_version=str(data.get("api_version") or ""),
            package_version=data.get("package_version"),
            imports={str(k): str(v) for k, v in imports.items()},
            slug=slug,
        )


@dataclass
class LoadedPackage:
    """Loader output for one sibling package."""
    directory: str
    slug: str
    meta: PackageMetadata
    git_head: Optional[str]
    version: Optional[str]
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ResolvedDependency:
    """One resolved import: a concrete dependency or a peer marker."""
    import_name: str
    name: str
    range: str

    @property
    def is_peer(self) -> bool:
        """True when no concrete version was found for the import."""
        return self.range == PEER_RANGE


class LookupStatus(Enum):
    """Registry lookup outcome."""
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RegistryLookup:
    """Result of a best-effort registry lookup."""
    status: LookupStatus
    identifier: str
    version: Optional[str] = None

    @classmethod
    def found(cls, identifier: str, version: str) -> "RegistryLookup":
        return cls(LookupStatus.FOUND, identifier, version)

    @classmethod
    def not_found(cls, identifier: str) -> "RegistryLookup":
        return cls(LookupStatus.NOT_FOUND, identifier)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass
class PackageOutcome:
    """Per-package result: either a written manifest or the failure reason."""
    slug: str
    manifest: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


@dataclass
class RunSummary:
    """Tally of a run: succeeded/failed packages plus the version index."""
    succeeded: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    versions: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_outcomes(
        cls, outcomes: List[PackageOutcome], versions: Dict[str, Dict[str, str]]
    ) -> "RunSummary":
        """Reduce outcomes without stopping at the first failure."""
        summary = cls(versions=versions)
        for outcome in outcomes:
            if outcome.ok:
                summary.succeeded.append(outcome.slug)
            else:
                summary.failures[outcome.slug] = outcome.reason or ""
        return summary

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.success_count,
            "failed": self.failure_count,
            "packages": sorted(self.succeeded),
            "failures": dict(sorted(self.failures.items())),
            "versions": self.versions,
        }
