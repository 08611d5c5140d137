"""Data models for coordinates, POM metadata and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# Type alias for the identity of an artifact: (groupId, artifactId).
ArtifactKey = Tuple[str, str]


class ResolutionMode(Enum):
    """Whether resolution stops at metadata or also materializes artifacts."""
    METADATA_ONLY = "metadata"
    WITH_DOWNLOAD = "download"


class Scope(Enum):
    """Maven dependency scopes."""
    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"
    PROVIDED = "provided"
    SYSTEM = "system"
    IMPORT = "import"

    @classmethod
    def from_token(cls, token: Optional[str]) -> Optional["Scope"]:
        """Map a declared scope to the enum; absent means compile, unknown means None."""
        if token is None or not token.strip():
            return cls.COMPILE
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None

    @property
    def transitive(self) -> bool:
        return self in (Scope.COMPILE, Scope.RUNTIME)


@dataclass(frozen=True)
class Coordinate:
    """A groupId:artifactId:version request."""
    group_id: str
    artifact_id: str
    version: str

    @property
    def key(self) -> ArtifactKey:
        return (self.group_id, self.artifact_id)

    def path(self, extension: str) -> str:
        """Repository-relative path of this coordinate's file with ``extension``."""
        group_path = self.group_id.replace(".", "/")
        return (
            f"{group_path}/{self.artifact_id}/{self.version}/"
            f"{self.artifact_id}-{self.version}.{extension}"
        )

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class Exclusion:
    """Suffix pattern suppressing dependency edges; ``*`` matches anything."""
    group_id: str
    artifact_id: str

    @staticmethod
    def _field_matches(pattern: str, value: str) -> bool:
        return pattern == "*" or value.endswith(pattern)

    def matches(self, group_id: str, artifact_id: str) -> bool:
        return self._field_matches(self.group_id, group_id) and self._field_matches(
            self.artifact_id, artifact_id
        )


@dataclass
class DependencyDeclaration:
    """A single <dependency> entry of a POM."""
    group_id: str
    artifact_id: str
    version: Optional[str]
    scope: Optional[Scope] = Scope.COMPILE
    raw_scope: Optional[str] = None
    exclusions: List[Exclusion] = field(default_factory=list)
    optional: bool = False
    type: Optional[str] = None

    @property
    def key(self) -> ArtifactKey:
        return (self.group_id, self.artifact_id)


@dataclass
class ProjectMetadata:
    """Decoded POM: typed projections plus the full decoded mapping in ``fields``."""
    group_id: str
    artifact_id: str
    version: str
    packaging: str = "jar"
    dependencies: List[DependencyDeclaration] = field(default_factory=list)
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> ArtifactKey:
        return (self.group_id, self.artifact_id)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version)

    def to_dict(self) -> Dict[str, Any]:
        """Flat summary used by reporting."""
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "packaging": self.packaging,
            "dependencyCount": len(self.dependencies),
        }
