"""Constants used in the project."""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    INPUT_ERROR = 3
    DECODE_ERROR = 4
    CACHE_WRITE_ERROR = 5
    CANCELLED = 130


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REPOSITORY_URL_MAVEN_CENTRAL = "https://repo1.maven.org/maven2"
    REPOSITORIES = [REPOSITORY_URL_MAVEN_CENTRAL]
    CACHE_DIR = os.path.join(os.path.expanduser("~"), ".mvnresolve", "repository")
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    MAX_WORKERS = 1
    USER_AGENT = "mvnresolve/0.1"

    DEFAULT_PACKAGING = "jar"
    POM_EXTENSION = "pom"
    # Packaging types whose payload is published as a plain jar
    JAR_PACKAGINGS = ("bundle", "maven-plugin", "eclipse-plugin", "test-jar", "ejb")

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "MVNRESOLVE_LOG_LEVEL"
    ENV_CONFIG = "MVNRESOLVE_CONFIG"
    ENV_REPOSITORIES = "MVNRESOLVE_REPOSITORIES"
    ENV_CACHE_DIR = "MVNRESOLVE_CACHE_DIR"
    ENV_REQUEST_TIMEOUT = "MVNRESOLVE_REQUEST_TIMEOUT"

    CONFIG_SEARCH_PATHS = [
        "mvnresolve.yml",
        "mvnresolve.yaml",
        os.path.join(os.path.expanduser("~"), ".config", "mvnresolve", "config.yml"),
    ]


def _read_config_file(path: str) -> Dict[str, Any]:
    """Read a YAML or JSON config file and return its top-level mapping."""
    with open(path, "r", encoding="utf-8") as fh:
        if path.lower().endswith(".json"):
            data = json.load(fh)
        else:
            import yaml  # pylint: disable=import-outside-toplevel

            data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a mapping")
    return data


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from an explicit path or the default locations.

    Precedence: explicit ``path`` argument, then ``MVNRESOLVE_CONFIG``, then the
    first existing entry of ``Constants.CONFIG_SEARCH_PATHS``. Returns an empty
    mapping when nothing is found.
    """
    candidates: List[str] = []
    if path:
        candidates.append(path)
    else:
        env_path = os.environ.get(Constants.ENV_CONFIG)
        if env_path:
            candidates.append(env_path)
        candidates.extend(Constants.CONFIG_SEARCH_PATHS)

    for candidate in candidates:
        if os.path.isfile(candidate):
            logger.debug("Loading configuration from %s", candidate)
            return _read_config_file(candidate)
        if path:
            raise FileNotFoundError(f"Configuration file not found: {path}")
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply a loaded configuration mapping onto ``Constants``."""
    repos = cfg.get("repositories")
    if isinstance(repos, list) and repos:
        Constants.REPOSITORIES = [str(r) for r in repos]
    if cfg.get("cache_dir"):
        Constants.CACHE_DIR = os.path.expanduser(str(cfg["cache_dir"]))
    if cfg.get("request_timeout") is not None:
        Constants.REQUEST_TIMEOUT = float(cfg["request_timeout"])
    if cfg.get("max_workers") is not None:
        Constants.MAX_WORKERS = int(cfg["max_workers"])


def apply_env_overrides(environ: Optional[Dict[str, str]] = None) -> None:
    """Apply environment variable overrides onto ``Constants``."""
    env = os.environ if environ is None else environ
    repos = env.get(Constants.ENV_REPOSITORIES)
    if repos:
        Constants.REPOSITORIES = [r.strip() for r in repos.split(",") if r.strip()]
    cache_dir = env.get(Constants.ENV_CACHE_DIR)
    if cache_dir:
        Constants.CACHE_DIR = os.path.expanduser(cache_dir)
    timeout = env.get(Constants.ENV_REQUEST_TIMEOUT)
    if timeout:
        try:
            Constants.REQUEST_TIMEOUT = float(timeout)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", Constants.ENV_REQUEST_TIMEOUT, timeout)
