"""Exception taxonomy for the package builder."""

from typing import List, Optional


class BuilderError(Exception):
    """Base class for builder errors."""


class InvalidVersionError(BuilderError, ValueError):
    """Raised when an upstream version string cannot be parsed or coerced."""

    def __init__(self, package: str, raw_version: Optional[str]):
        self.package = package
        self.raw_version = raw_version
        super().__init__(f"Invalid raw version: {raw_version!r} for {package}")


class UnresolvedDependencyError(BuilderError):
    """Raised when one or more imports of a package have no concrete version."""

    def __init__(self, package: str, missing: List[str]):
        self.package = package
        self.missing = list(missing)
        super().__init__(f"{package} has missing dependencies: {','.join(self.missing)}.")


class MetadataReadError(BuilderError):
    """Raised when a package's required metadata descriptor cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read package metadata at {path}: {reason}")


class RegistryLookupError(BuilderError):
    """Raised by the registry client; never escapes the fallback resolver."""
