"""npm registry client for dist-tag lookups."""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
from typing import Any, Dict, Optional

import aiohttp

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from versioning.errors import RegistryLookupError

logger = logging.getLogger(__name__)


class NpmRegistryClient:
    """Async client for the npm registry document endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        """Initialize the client.

        Args:
            base_url: Registry base URL. Defaults to Constants.REGISTRY_URL_NPM.
            timeout: Total request timeout in seconds.
        """
        self._base_url = (base_url or Constants.REGISTRY_URL_NPM).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else Constants.REQUEST_TIMEOUT
        )
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"Accept": "application/json", "User-Agent": "gi-types-builder"},
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def build_url(self, identifier: str, tag: str) -> str:
        """Build the dist-tag document URL; scoped names keep '@' and quote '/'."""
        quoted = urllib.parse.quote(identifier, safe="@")
        return f"{self._base_url}/{quoted}/{urllib.parse.quote(tag, safe='')}"

    async def fetch_dist_tag(self, identifier: str, tag: str) -> Dict[str, Any]:
        """Fetch the version document published under a dist-tag.

        Raises:
            RegistryLookupError: On transport errors, non-200 responses or
                bodies that are not a JSON object.
        """
        if self._session is None:
            await self.start()

        url = self.build_url(identifier, tag)
        target = safe_url(url)
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="npm_client",
                    action="GET",
                    target=target,
                ),
            )

        with Timer() as timer:
            try:
                async with self._session.get(url) as response:
                    status = response.status
                    text = await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise RegistryLookupError(f"{identifier}: request failed: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="npm_client",
                    action="GET",
                    status_code=status,
                    duration_ms=timer.duration_ms(),
                    target=target,
                ),
            )

        if status == 404:
            raise RegistryLookupError(f"{identifier}@{tag}: not found")
        if status != 200:
            raise RegistryLookupError(f"{identifier}@{tag}: unexpected status {status}")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RegistryLookupError(f"{identifier}@{tag}: invalid JSON") from exc
        if not isinstance(data, dict):
            raise RegistryLookupError(f"{identifier}@{tag}: unexpected document type")
        return data

    async def __aenter__(self) -> "NpmRegistryClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
