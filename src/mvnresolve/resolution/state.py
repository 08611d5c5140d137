"""Per-run resolution state and cancellation signal."""
from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

from mvnresolve.errors import ResolutionCancelled
from mvnresolve.versioning.maven_version import VersionCache
from mvnresolve.versioning.models import ArtifactKey, Coordinate, Exclusion, ProjectMetadata


class CancelToken:
    """Thread-safe cancellation flag shared between a caller and a running resolution."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, target: Optional[str] = None) -> None:
        if self._event.is_set():
            raise ResolutionCancelled("Resolution cancelled", target=target)


@dataclass
class ResolutionState:
    """Queue, resource map, exclusions and scanned markers of a single run."""
    queue: Deque[Coordinate] = field(default_factory=deque)
    resources: Dict[ArtifactKey, ProjectMetadata] = field(default_factory=dict)
    exclusions: List[Exclusion] = field(default_factory=list)
    scanned: Dict[ArtifactKey, bool] = field(default_factory=dict)
    versions: VersionCache = field(default_factory=VersionCache)
    fetch_count: int = 0

    def enqueue(self, coordinate: Coordinate) -> None:
        self.queue.append(coordinate)

    def add_exclusions(self, exclusions: List[Exclusion]) -> None:
        known: Set[Exclusion] = set(self.exclusions)
        for exclusion in exclusions:
            if exclusion not in known:
                self.exclusions.append(exclusion)
                known.add(exclusion)

    def is_excluded(self, group_id: str, artifact_id: str) -> bool:
        return any(e.matches(group_id, artifact_id) for e in self.exclusions)

    def is_satisfied(self, coordinate: Coordinate) -> bool:
        """True when the resource map already holds this id at an equal or higher version."""
        current = self.resources.get(coordinate.key)
        if current is None:
            return False
        return self.versions.compare(current.version, coordinate.version) >= 0

    def store(self, key: ArtifactKey, pom: ProjectMetadata) -> None:
        """Record a newly fetched POM; it must be scanned again."""
        self.resources[key] = pom
        self.scanned[key] = False

    def unscanned(self) -> List[ArtifactKey]:
        return [key for key in self.resources if not self.scanned.get(key, False)]
