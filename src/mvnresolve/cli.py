"""mvnresolve command line entry point."""
from __future__ import annotations

import logging
import signal
import sys
from typing import List, Optional

import yaml

from mvnresolve.args import parse_args
from mvnresolve.cli_config import apply_overrides
from mvnresolve.common.logging_utils import configure_logging, extra_context, is_debug_enabled
from mvnresolve.constants import Constants, ExitCodes
from mvnresolve.errors import (
    CacheWriteError,
    DecodeError,
    InputFormatError,
    NotFoundError,
    ResolutionCancelled,
    ResolutionError,
)
from mvnresolve.registry.maven.gateway import CacheGateway
from mvnresolve.report import export_csv, export_json, render_table
from mvnresolve.resolution import CancelToken, MavenResolver
from mvnresolve.versioning.models import ResolutionMode
from mvnresolve.versioning.parser import load_coordinates_file

logger = logging.getLogger(__name__)

_EXIT_CODES = (
    (InputFormatError, ExitCodes.INPUT_ERROR),
    (DecodeError, ExitCodes.DECODE_ERROR),
    (NotFoundError, ExitCodes.CONNECTION_ERROR),
    (CacheWriteError, ExitCodes.CACHE_WRITE_ERROR),
    (ResolutionCancelled, ExitCodes.CANCELLED),
)


def exit_code_for(error: ResolutionError) -> ExitCodes:
    """Map a resolution error to the process exit code."""
    for error_type, code in _EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return ExitCodes.CONNECTION_ERROR


def build_seed_list(args) -> List[str]:
    """Collect seed coordinates from -p flags or -l files."""
    if args.SINGLE:
        return list(args.SINGLE)
    seeds: List[str] = []
    for file_name in args.LIST_FROM_FILE or []:
        try:
            seeds.extend(load_coordinates_file(file_name))
        except OSError as e:
            logger.error("Could not read coordinate list %s: %s, aborting", file_name, e)
            sys.exit(ExitCodes.FILE_ERROR.value)
    return seeds


def _write_output(resources, args) -> None:
    fmt = args.OUTPUT_FORMAT
    if fmt is None:
        fmt = "csv" if args.OUTPUT.lower().endswith(".csv") else "json"
    if fmt == "csv":
        export_csv(resources, args.OUTPUT)
    else:
        export_json(resources, args.OUTPUT)


def main(argv: Optional[List[str]] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    try:
        apply_overrides(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Configuration could not be loaded: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    seeds = build_seed_list(args)
    if not seeds:
        logger.warning("No coordinates found in the input list.")
        sys.exit(ExitCodes.SUCCESS.value)

    mode = ResolutionMode.WITH_DOWNLOAD if args.DOWNLOAD else ResolutionMode.METADATA_ONLY
    cancel = CancelToken()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel.cancel())
    try:
        with CacheGateway.from_urls(Constants.CACHE_DIR, Constants.REPOSITORIES) as gateway:
            resolver = MavenResolver(gateway, max_workers=Constants.MAX_WORKERS)
            resources = resolver.resolve(seeds, mode=mode, cancel=cancel)
    except ResolutionError as e:
        logger.error("Resolution failed: %s", e)
        sys.exit(exit_code_for(e).value)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if args.OUTPUT:
        _write_output(resources, args)
    if not args.QUIET:
        print(render_table(resources))
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
