"""Layered runtime configuration for the CLI.

Precedence, lowest to highest: built-in ``Constants`` defaults, the YAML/JSON
config file, environment variables, then CLI flags.
"""

from __future__ import annotations

import logging
import os

from mvnresolve.constants import Constants, _load_yaml_config, apply_config, apply_env_overrides

logger = logging.getLogger(__name__)


def apply_cli_overrides(args) -> None:
    """Apply CLI flags onto ``Constants`` (highest precedence)."""
    if getattr(args, "REPOSITORIES", None):
        Constants.REPOSITORIES = list(args.REPOSITORIES)
    if getattr(args, "CACHE_DIR", None):
        Constants.CACHE_DIR = os.path.expanduser(args.CACHE_DIR)
    if getattr(args, "WORKERS", None) is not None:
        Constants.MAX_WORKERS = max(1, int(args.WORKERS))
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.REQUEST_TIMEOUT = float(args.TIMEOUT)


def apply_overrides(args) -> None:
    """Load the config file and apply environment and CLI overrides in order.

    Raises:
        FileNotFoundError: when ``--config`` names a missing file.
        ValueError: when the config file is not a mapping.
    """
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    if cfg:
        apply_config(cfg)
    apply_env_overrides()
    apply_cli_overrides(args)
    logger.debug(
        "Effective configuration: repositories=%s cache_dir=%s workers=%s timeout=%s",
        Constants.REPOSITORIES,
        Constants.CACHE_DIR,
        Constants.MAX_WORKERS,
        Constants.REQUEST_TIMEOUT,
    )
