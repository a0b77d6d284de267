"""Persistence of generated package files."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict

from constants import Constants

logger = logging.getLogger(__name__)


def serialize_manifest(manifest: Dict[str, Any]) -> str:
    """JSON text as written to package.json (4-space indent, trailing newline)."""
    return json.dumps(manifest, indent=Constants.MANIFEST_INDENT, ensure_ascii=False) + "\n"


def _write_text(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)


async def write_package_files(
    package_dir: str, manifest: Dict[str, Any], license_text: str, readme_text: str
) -> None:
    """Write package.json, LICENSE and README.md into one package directory.

    Raises:
        OSError: If any file cannot be written.
    """
    files = {
        Constants.PACKAGE_JSON_FILE: serialize_manifest(manifest),
        Constants.LICENSE_FILE: license_text,
        Constants.README_FILE: readme_text,
    }
    await asyncio.gather(
        *(
            asyncio.to_thread(_write_text, os.path.join(package_dir, name), text)
            for name, text in files.items()
        )
    )
    logger.debug("Wrote %s", package_dir)
