"""Argument parsing functionality for mvnresolve."""

import argparse
from typing import List, Optional


def parse_args(argv: Optional[List[str]] = None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="mvnresolve",
        description=(
            "mvnresolve - Transitive Maven dependency resolver"
        ),
        add_help=True,
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-p", "--package",
                             dest="SINGLE",
                             help="Coordinate to resolve (groupId:artifactId:version); repeatable.",
                             action="append", type=str)
    input_group.add_argument("-l", "--load_list",
                             dest="LIST_FROM_FILE",
                             help="Load coordinates from a file, one per line",
                             action="append", type=str)

    parser.add_argument("-r", "--repository",
                        dest="REPOSITORIES",
                        help="Repository base URL, tried in the given order; repeatable.",
                        action="append", type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Local artifact cache root",
                        action="store", type=str)
    parser.add_argument("--download",
                        dest="DOWNLOAD",
                        help="Also download every resolved binary artifact into the cache.",
                        action="store_true")
    parser.add_argument("-w", "--workers",
                        dest="WORKERS",
                        help="Number of concurrent fetches per resolution pass",
                        action="store", type=int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="HTTP request timeout in seconds",
                        action="store", type=float)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=['json', 'csv'])

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not print the result table to the console.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
