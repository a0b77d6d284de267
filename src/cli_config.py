"""Runtime configuration from YAML and CLI overrides.

Precedence, lowest to highest: built-in Constants, the YAML config file,
CLI flags.
"""

from __future__ import annotations

import logging

from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def apply_config_overrides(args) -> None:
    """Load the YAML config and apply CLI overrides onto Constants.

    Raises:
        yaml.YAMLError: If the config file exists but is not valid YAML.
    """
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    if cfg:
        apply_config(cfg)

    if getattr(args, "REGISTRY_URL", None):
        Constants.REGISTRY_URL_NPM = args.REGISTRY_URL
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.REQUEST_TIMEOUT = int(args.TIMEOUT)
    if not getattr(args, "TAG", None):
        args.TAG = Constants.DEFAULT_TAG

    logger.debug(
        "Effective config: prefix=%s registry=%s timeout=%s tag=%s",
        Constants.PACKAGE_PREFIX,
        Constants.REGISTRY_URL_NPM,
        Constants.REQUEST_TIMEOUT,
        args.TAG,
    )
