"""Token parsing utilities for coordinates and version tokens."""

from __future__ import annotations

from typing import List, Sequence, Union

from mvnresolve.errors import DecodeError, InputFormatError
from .models import Coordinate

# Characters that would let a coordinate field address outside its cache directory
_PATH_SEPARATORS = ("/", "\\")


def is_path_safe(field: str) -> bool:
    """True when ``field`` can be used verbatim as a repository path component."""
    if field in (".", ".."):
        return False
    return not any(sep in field for sep in _PATH_SEPARATORS)


def parse_coordinate(token: Union[str, Sequence[str]]) -> Coordinate:
    """Parse ``groupId:artifactId:version`` or a pre-split triplet into a Coordinate.

    Raises:
        InputFormatError: when the token does not have exactly three non-empty fields,
            or when a field contains a path separator or is ``.``/``..``.
    """
    if isinstance(token, str):
        parts = token.strip().split(":")
        raw = token
    else:
        parts = list(token)
        raw = ":".join(str(p) for p in parts)
    if len(parts) != 3:
        raise InputFormatError(
            f"Expected groupId:artifactId:version, got {raw!r}", target=raw
        )
    group_id, artifact_id, version = (str(p).strip() for p in parts)
    if not (group_id and artifact_id and version):
        raise InputFormatError(f"Empty field in coordinate {raw!r}", target=raw)
    if not all(is_path_safe(p) for p in (group_id, artifact_id, version)):
        raise InputFormatError(f"Path characters in coordinate {raw!r}", target=raw)
    return Coordinate(group_id, artifact_id, version)


def parse_coordinates(tokens: Sequence[Union[str, Sequence[str]]]) -> List[Coordinate]:
    return [parse_coordinate(t) for t in tokens]


def strip_exact_version(token: str) -> str:
    """Unwrap an exact-version bracket: ``[1.2.3]`` -> ``1.2.3``.

    Plain versions pass through unchanged. Real ranges such as ``[1.0,2.0)``
    are not supported and raise DecodeError.
    """
    value = token.strip()
    if not value or value[0] not in "[(" and value[-1] not in "])":
        return value
    if value.startswith("[") and value.endswith("]") and "," not in value:
        inner = value[1:-1].strip()
        if inner:
            return inner
    raise DecodeError(f"Unsupported version range {token!r}", target=token)


def load_coordinates_file(file_name: str) -> List[str]:
    """Load coordinate tokens from a file, one per line.

    Blank lines and lines starting with ``#`` are skipped.

    Raises:
        OSError: when the file cannot be read.
    """
    with open(file_name, encoding="utf-8") as file:
        return [
            line.strip()
            for line in file
            if line.strip() and not line.strip().startswith("#")
        ]
