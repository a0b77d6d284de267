"""Per-run index of resolved published versions for sibling packages."""

from typing import Dict, Mapping, Optional


class VersionIndex:
    """Mapping of upstream library name -> {api version -> published version}.

    Built by the loader at the start of a run and handed to the dependency
    resolver. Each package registers only its own (name, api version) key,
    so concurrent loads never overwrite each other. Lookups read the live
    mapping; a miss is a normal outcome, not an ordering problem.
    """

    def __init__(self) -> None:
        self._versions: Dict[str, Dict[str, str]] = {}

    def register(self, name: str, api_version: str, version: str) -> None:
        """Record the resolved version of one sibling package."""
        self._versions.setdefault(name, {})[api_version] = version

    def lookup(self, name: str) -> Optional[Mapping[str, str]]:
        """Return the api-version mapping for a library, or None if unknown."""
        return self._versions.get(name)

    def get(self, name: str, api_version: str) -> Optional[str]:
        """Return the published version for (name, api version), or None."""
        versions = self._versions.get(name)
        if versions is None:
            return None
        return versions.get(api_version)

    def as_dict(self) -> Dict[str, Dict[str, str]]:
        """Sorted snapshot for reporting."""
        return {
            name: dict(sorted(versions.items()))
            for name, versions in sorted(self._versions.items())
        }

    def __contains__(self, name: object) -> bool:
        return name in self._versions

    def __len__(self) -> int:
        return len(self._versions)

    def __repr__(self) -> str:
        return f"VersionIndex({self.as_dict()!r})"
