"""Cache-first fetch gateway over an ordered list of Maven repositories."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from mvnresolve.common.http_client import FetchStatus, HttpRepository
from mvnresolve.common.logging_utils import extra_context, is_debug_enabled, Timer
from mvnresolve.common.storage import LocalStore
from mvnresolve.constants import Constants
from mvnresolve.errors import CacheWriteError, NotFoundError
from mvnresolve.versioning.models import Coordinate

if TYPE_CHECKING:  # pragma: no cover
    from mvnresolve.resolution.state import CancelToken

logger = logging.getLogger(__name__)


def extension_for(packaging: Optional[str]) -> str:
    """File extension of the binary payload for a POM packaging value."""
    if not packaging:
        return Constants.DEFAULT_PACKAGING
    if packaging in Constants.JAR_PACKAGINGS:
        return "jar"
    return packaging


def pom_path(coordinate: Coordinate) -> str:
    return coordinate.path(Constants.POM_EXTENSION)


def artifact_path(coordinate: Coordinate, packaging: Optional[str] = None) -> str:
    return coordinate.path(extension_for(packaging))


class CacheGateway:
    """Resolves relative artifact paths to bytes.

    The local store is consulted first; on a miss each repository is tried in
    priority order and the first success is persisted before it is returned.
    Repositories are any objects with ``fetch(relative_path, cancel) -> FetchResult``.
    """

    def __init__(self, store: LocalStore, repositories: Sequence):
        self.store = store
        self.repositories = list(repositories)

    @classmethod
    def from_urls(
        cls,
        cache_dir: str,
        urls: Sequence[str],
        *,
        timeout: Optional[float] = None,
    ) -> "CacheGateway":
        """Build a gateway over ``HttpRepository`` instances for ``urls``."""
        repositories: List[HttpRepository] = [HttpRepository(u, timeout=timeout) for u in urls]
        return cls(LocalStore(cache_dir), repositories)

    def close(self) -> None:
        """Close every repository that holds network resources."""
        for repository in self.repositories:
            close = getattr(repository, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> "CacheGateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def fetch(self, relative_path: str, cancel: Optional["CancelToken"] = None) -> bytes:
        """Return the bytes stored at ``relative_path``.

        Raises:
            NotFoundError: when every repository failed for the path.
            CacheWriteError: when the downloaded bytes cannot be persisted
                or the cached entry cannot be read.
        """
        try:
            cached = self.store.read_bytes(relative_path)
        except (OSError, ValueError) as exc:
            raise CacheWriteError(
                f"Could not read {relative_path} from cache: {exc}", target=relative_path
            ) from exc
        if cached is not None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Cache hit",
                    extra=extra_context(
                        event="cache_hit", component="gateway", action="fetch", target=relative_path
                    )
                )
            return cached
        content = self._download(relative_path, cancel)
        self._persist(relative_path, content)
        return content

    def ensure(self, relative_path: str, cancel: Optional["CancelToken"] = None) -> str:
        """Make sure ``relative_path`` is cached and return its filesystem path.

        Unlike ``fetch`` this never reads an already-cached payload back.
        """
        try:
            if self.store.exists(relative_path):
                return self.store.absolute(relative_path)
        except ValueError as exc:
            raise CacheWriteError(
                f"Invalid cache path {relative_path}: {exc}", target=relative_path
            ) from exc
        content = self._download(relative_path, cancel)
        return self._persist(relative_path, content)

    def _download(self, relative_path: str, cancel: Optional["CancelToken"]) -> bytes:
        for repository in self.repositories:
            if cancel is not None:
                cancel.raise_if_cancelled(relative_path)
            with Timer() as t:
                result = repository.fetch(relative_path, cancel)
            if result.ok and result.content is not None:
                logger.info("Downloaded %s from %r", relative_path, repository)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Repository fetch ok",
                        extra=extra_context(
                            event="fetch",
                            component="gateway",
                            action="download",
                            outcome="found",
                            duration_ms=t.duration_ms(),
                            target=relative_path,
                        )
                    )
                return result.content
            if result.status is FetchStatus.ERROR:
                logger.warning(
                    "Repository %r failed for %s (%s), trying next",
                    repository,
                    relative_path,
                    result.detail,
                )
            elif is_debug_enabled(logger):
                logger.debug(
                    "Repository miss",
                    extra=extra_context(
                        event="fetch",
                        component="gateway",
                        action="download",
                        outcome="not_found",
                        target=relative_path,
                    )
                )
        raise NotFoundError(
            f"{relative_path} not found in cache or any of {len(self.repositories)} repositories",
            target=relative_path,
        )

    def _persist(self, relative_path: str, content: bytes) -> str:
        try:
            return self.store.write_bytes(relative_path, content)
        except (OSError, ValueError) as exc:
            raise CacheWriteError(
                f"Could not write {relative_path} to cache: {exc}", target=relative_path
            ) from exc
