"""Transitive dependency resolution.

Resolution is a fixed-point breadth expansion over a work queue:

* drain: pop coordinates, skip ids already held at an equal or higher version,
  fetch and decode the POM of everything else;
* expand: walk the dependency lists of every POM not yet scanned, filtering by
  scope and by the run-wide exclusion set, and enqueue what remains.

The two phases alternate until the queue stays empty. Upgrading an id to a
higher version does not retract coordinates already enqueued by the version it
replaced.
"""
from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple, Union

from mvnresolve.common.logging_utils import extra_context, is_debug_enabled, Timer
from mvnresolve.constants import Constants
from mvnresolve.errors import DecodeError, Phase, ResolutionError
from mvnresolve.registry.maven.gateway import CacheGateway, artifact_path, pom_path
from mvnresolve.registry.maven.pom import decode_pom
from mvnresolve.versioning.models import (
    ArtifactKey,
    Coordinate,
    ProjectMetadata,
    ResolutionMode,
)
from mvnresolve.versioning.parser import is_path_safe, parse_coordinates, strip_exact_version
from .state import CancelToken, ResolutionState

logger = logging.getLogger(__name__)

Seed = Union[str, Sequence[str]]
ResourceMap = Dict[ArtifactKey, ProjectMetadata]


class MavenResolver:
    """Resolves seed coordinates into a resource map through a ``CacheGateway``.

    Each ``resolve`` call owns a fresh ``ResolutionState``, so one resolver can
    serve concurrent, independent resolutions.
    """

    def __init__(self, gateway: CacheGateway, *, max_workers: int = 1):
        self.gateway = gateway
        self.max_workers = max(1, int(max_workers))

    def resolve(
        self,
        seeds: Sequence[Seed],
        mode: ResolutionMode = ResolutionMode.METADATA_ONLY,
        cancel: Optional[CancelToken] = None,
    ) -> ResourceMap:
        """Resolve ``seeds`` transitively.

        Args:
            seeds: ``groupId:artifactId:version`` strings or pre-split triplets.
            mode: METADATA_ONLY, or WITH_DOWNLOAD to also cache every binary artifact.
            cancel: Optional token; setting it aborts the run with ResolutionCancelled.

        Returns:
            Mapping of (groupId, artifactId) to the resolved ProjectMetadata.

        Raises:
            ResolutionError: any input, fetch, decode, expansion or download failure.
        """
        coordinates = parse_coordinates(seeds)
        state = ResolutionState()
        for coordinate in coordinates:
            state.enqueue(coordinate)

        executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        passes = 0
        try:
            with Timer() as t:
                while state.queue:
                    passes += 1
                    self._drain(state, cancel, executor)
                    self._expand(state, cancel)
                if mode is ResolutionMode.WITH_DOWNLOAD:
                    self._download(state, cancel, executor)
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        logger.info(
            "Resolved %d artifacts in %d passes (%d metadata fetches)",
            len(state.resources),
            passes,
            state.fetch_count,
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Resolution finished",
                extra=extra_context(
                    event="function_exit",
                    component="resolver",
                    action="resolve",
                    outcome="success",
                    count=len(state.resources),
                    duration_ms=t.duration_ms(),
                )
            )
        return dict(state.resources)

    def _drain(self, state: ResolutionState, cancel: Optional[CancelToken], executor) -> None:
        """Fetch every queued coordinate that would raise its id's version."""
        batch: List[Coordinate] = []
        planned: Dict[ArtifactKey, str] = {}
        while state.queue:
            coordinate = state.queue.popleft()
            if cancel is not None:
                cancel.raise_if_cancelled(str(coordinate))
            best = planned.get(coordinate.key)
            if best is not None:
                satisfied = state.versions.compare(best, coordinate.version) >= 0
            else:
                satisfied = state.is_satisfied(coordinate)
            if satisfied:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Already satisfied",
                        extra=extra_context(
                            event="decision",
                            component="resolver",
                            action="drain",
                            outcome="skip",
                            target=str(coordinate),
                        )
                    )
                continue
            planned[coordinate.key] = coordinate.version
            batch.append(coordinate)

        poms = self._run_all(batch, lambda c: self._fetch_pom(c, cancel), executor)
        state.fetch_count += len(batch)
        # Applied in queue order so the highest version of each id lands last.
        for coordinate, pom in zip(batch, poms):
            previous = state.resources.get(coordinate.key)
            if previous is not None:
                logger.info("Upgrading %s:%s from %s to %s", *coordinate.key, previous.version, pom.version)
            state.store(coordinate.key, pom)

    def _expand(self, state: ResolutionState, cancel: Optional[CancelToken]) -> None:
        """Enqueue the followable dependencies of every unscanned POM."""
        for key in state.unscanned():
            if cancel is not None:
                cancel.raise_if_cancelled(":".join(key))
            pom = state.resources[key]
            owner = str(pom.coordinate)
            for dep in pom.dependencies:
                if dep.scope is None or not dep.scope.transitive:
                    continue
                if state.is_excluded(dep.group_id, dep.artifact_id):
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Dependency excluded",
                            extra=extra_context(
                                event="decision",
                                component="resolver",
                                action="expand",
                                outcome="excluded",
                                target=f"{dep.group_id}:{dep.artifact_id}",
                            )
                        )
                    continue
                state.add_exclusions(dep.exclusions)
                try:
                    version = self._declared_version(dep.group_id, dep.artifact_id, dep.version)
                except DecodeError as exc:
                    raise exc.with_context(Phase.EXPANSION, owner)
                state.enqueue(Coordinate(dep.group_id, dep.artifact_id, version))
            state.scanned[key] = True

    @staticmethod
    def _declared_version(group_id: str, artifact_id: str, token: Optional[str]) -> str:
        name = f"{group_id}:{artifact_id}"
        if not token:
            raise DecodeError(f"Dependency {name} declares no version", target=name)
        if "${" in token:
            raise DecodeError(f"Dependency {name} has unresolved version {token!r}", target=name)
        version = strip_exact_version(token)
        if not all(is_path_safe(f) for f in (group_id, artifact_id, version)):
            raise DecodeError(f"Dependency {name}:{version} contains path characters", target=name)
        return version

    def _download(self, state: ResolutionState, cancel: Optional[CancelToken], executor) -> None:
        """Ensure the binary payload of every resolved artifact is cached."""
        poms = list(state.resources.values())
        paths = self._run_all(
            poms, lambda p: self._ensure_artifact(p, cancel), executor, key=lambda p: p.key
        )
        logger.info("Ensured %d artifacts in cache", len(paths))

    def _fetch_pom(self, coordinate: Coordinate, cancel: Optional[CancelToken]) -> ProjectMetadata:
        target = str(coordinate)
        try:
            data = self.gateway.fetch(pom_path(coordinate), cancel)
        except ResolutionError as exc:
            raise exc.with_context(Phase.METADATA_FETCH, target)
        try:
            pom = decode_pom(data)
        except DecodeError as exc:
            raise exc.with_context(Phase.DECODE, target)
        if pom.version != coordinate.version:
            logger.warning("%s declares version %s; keeping requested version", target, pom.version)
            pom = dataclasses.replace(pom, version=coordinate.version)
        return pom

    def _ensure_artifact(self, pom: ProjectMetadata, cancel: Optional[CancelToken]) -> str:
        try:
            return self.gateway.ensure(artifact_path(pom.coordinate, pom.packaging), cancel)
        except ResolutionError as exc:
            raise exc.with_context(Phase.ARTIFACT_DOWNLOAD, str(pom.coordinate))

    @staticmethod
    def _run_all(items, func, executor, key=None) -> list:
        """Apply ``func`` to ``items`` and return results in input order.

        With an executor, work for equal items is claimed once and joined by
        later requesters; the first failure in input order is raised after
        pending work is cancelled.
        """
        if executor is None:
            return [func(item) for item in items]
        inflight: Dict[object, Future] = {}
        futures: List[Tuple[object, Future]] = []
        for item in items:
            claim = key(item) if key is not None else item
            future = inflight.get(claim)
            if future is None:
                future = executor.submit(func, item)
                inflight[claim] = future
            futures.append((item, future))
        results = []
        try:
            for _, future in futures:
                results.append(future.result())
        except BaseException:
            for _, future in futures:
                future.cancel()
            raise
        return results


def resolve(
    seeds: Sequence[Seed],
    *,
    repositories: Optional[Sequence[str]] = None,
    cache_dir: Optional[str] = None,
    mode: ResolutionMode = ResolutionMode.METADATA_ONLY,
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel: Optional[CancelToken] = None,
) -> ResourceMap:
    """Resolve ``seeds`` against HTTP repositories, defaulting to ``Constants``."""
    with CacheGateway.from_urls(
        cache_dir or Constants.CACHE_DIR,
        list(repositories or Constants.REPOSITORIES),
        timeout=timeout,
    ) as gateway:
        resolver = MavenResolver(gateway, max_workers=max_workers or Constants.MAX_WORKERS)
        return resolver.resolve(seeds, mode=mode, cancel=cancel)
