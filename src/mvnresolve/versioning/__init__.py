"""Coordinates, POM data models and Maven version ordering."""

from .maven_version import MavenVersion, VersionCache, compare_versions, parse_version, sort_versions
from .models import (
    ArtifactKey,
    Coordinate,
    DependencyDeclaration,
    Exclusion,
    ProjectMetadata,
    ResolutionMode,
    Scope,
)
from .parser import parse_coordinate, parse_coordinates, strip_exact_version

__all__ = [
    "ArtifactKey",
    "Coordinate",
    "DependencyDeclaration",
    "Exclusion",
    "MavenVersion",
    "ProjectMetadata",
    "ResolutionMode",
    "Scope",
    "VersionCache",
    "compare_versions",
    "parse_coordinate",
    "parse_coordinates",
    "parse_version",
    "sort_versions",
    "strip_exact_version",
]
