"""npm registry access: HTTP client and the best-effort version fallback."""

from .client import NpmRegistryClient
from .fallback import RegistryFallbackResolver

__all__ = ["NpmRegistryClient", "RegistryFallbackResolver"]
