"""mvnresolve: transitive Maven dependency resolution against ordered repositories."""

from mvnresolve.errors import (
    CacheWriteError,
    DecodeError,
    InputFormatError,
    NotFoundError,
    Phase,
    ResolutionCancelled,
    ResolutionError,
)
from mvnresolve.registry.maven import CacheGateway, decode_pom
from mvnresolve.resolution import CancelToken, MavenResolver, resolve
from mvnresolve.versioning import (
    Coordinate,
    ProjectMetadata,
    ResolutionMode,
    compare_versions,
    sort_versions,
)

__version__ = "0.1.0"

__all__ = [
    "CacheGateway",
    "CacheWriteError",
    "CancelToken",
    "Coordinate",
    "DecodeError",
    "InputFormatError",
    "MavenResolver",
    "NotFoundError",
    "Phase",
    "ProjectMetadata",
    "ResolutionCancelled",
    "ResolutionError",
    "ResolutionMode",
    "compare_versions",
    "decode_pom",
    "resolve",
    "sort_versions",
]
