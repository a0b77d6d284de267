"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    PACKAGE_FAILURES = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PACKAGE_PREFIX = "@gi-types"
    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for registry lookups
    DEFAULT_TAG = "latest"
    GROUP_ROOT_TEMPLATE = "../{path}/packages/{prefix}/"
    REPOSITORY_OWNER = "gi-ts"
    REPOSITORY_URL_TEMPLATE = "https://github.com/{owner}/{path}"

    METADATA_FILE = "doc.json"
    PACKAGE_JSON_FILE = "package.json"
    README_FILE = "README.md"
    LICENSE_FILE = "LICENSE"
    TYPES_ENTRY = "index.d.ts"
    MANIFEST_FILES = [TYPES_ENTRY, METADATA_FILE, PACKAGE_JSON_FILE, README_FILE, LICENSE_FILE]
    MANIFEST_INDENT = 4

    LICENSE = "MIT"
    TYPESCRIPT_VERSION = "4.1"
    CONTRIBUTORS = [
        {
            "name": "Evan Welsh",
            "url": "https://github.com/ewlsh/",
            "githubUsername": "ewlsh",
        },
    ]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "GITYPES_LOG_LEVEL"
    CONFIG_ENV = "GITYPES_CONFIG"
    DEFAULT_CONFIG_FILES = ["gitypes.yml", "gitypes.yaml"]


# YAML keys under the "builder" section mapped onto Constants attributes.
_CONFIG_KEYS = {
    "package_prefix": ("PACKAGE_PREFIX", str),
    "registry_url": ("REGISTRY_URL_NPM", str),
    "request_timeout": ("REQUEST_TIMEOUT", int),
    "default_tag": ("DEFAULT_TAG", str),
    "repository_owner": ("REPOSITORY_OWNER", str),
    "typescript_version": ("TYPESCRIPT_VERSION", str),
}


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML config file, returning an empty dict when none is found.

    Lookup order: explicit path, the GITYPES_CONFIG environment variable,
    then the default file names in the working directory.
    """
    candidates = []
    if path:
        candidates.append(path)
    env_path = os.environ.get(Constants.CONFIG_ENV)
    if env_path:
        candidates.append(env_path)
    candidates.extend(Constants.DEFAULT_CONFIG_FILES)

    for candidate in candidates:
        if not os.path.isfile(candidate):
            if candidate == path:
                logger.warning("Config file not found: %s", candidate)
            continue
        import yaml  # pylint: disable=import-outside-toplevel

        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: top level is not a mapping", candidate)
            return {}
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply the "builder" section of a loaded config onto Constants."""
    section = cfg.get("builder", cfg) if isinstance(cfg, dict) else {}
    if not isinstance(section, dict):
        return
    for key, (attr, cast) in _CONFIG_KEYS.items():
        if key in section and section[key] is not None:
            try:
                setattr(Constants, attr, cast(section[key]))
            except (TypeError, ValueError):
                logger.warning("Invalid value for config key '%s': %r", key, section[key])
