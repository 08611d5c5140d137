"""HTTP repository fetcher used by the cache gateway.

Each remote repository is wrapped in an ``HttpRepository`` whose ``fetch``
never raises for network trouble: it reports a tri-state ``FetchResult`` so
the gateway can fall through to the next repository in priority order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

import requests

from mvnresolve.constants import Constants
from mvnresolve.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

if TYPE_CHECKING:  # pragma: no cover
    from mvnresolve.resolution.state import CancelToken

logger = logging.getLogger(__name__)

# Statuses that mean "this repository does not have the path"
_NOT_FOUND_STATUSES = (404, 410)


class FetchStatus(Enum):
    """Outcome of a single repository fetch attempt."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class FetchResult:
    """Tri-state fetch outcome; ``content`` is set only for FOUND."""
    status: FetchStatus
    content: Optional[bytes] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.FOUND


class HttpRepository:
    """A remote Maven repository addressed by its base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = Constants.REQUEST_TIMEOUT if timeout is None else timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", Constants.USER_AGENT)

    def __repr__(self) -> str:
        return f"HttpRepository({safe_url(self.base_url)!r})"

    def close(self) -> None:
        """Release pooled connections held by the session."""
        self._session.close()

    def url_for(self, relative_path: str) -> str:
        return f"{self.base_url}/{relative_path.lstrip('/')}"

    def fetch(self, relative_path: str, cancel: Optional["CancelToken"] = None) -> FetchResult:
        """GET ``relative_path`` below the base URL.

        The body is streamed so a cancellation signal aborts a long download
        between chunks; in that case ``ResolutionCancelled`` propagates.
        """
        url = self.url_for(relative_path)
        target = safe_url(url)
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=target,
                    )
                )
            try:
                with self._session.get(url, timeout=self.timeout, stream=True) as res:
                    if res.status_code in _NOT_FOUND_STATUSES:
                        return FetchResult(FetchStatus.NOT_FOUND, detail=f"HTTP {res.status_code}")
                    if res.status_code != 200:
                        logger.warning(
                            "HTTP non-2xx handled",
                            extra=extra_context(
                                event="http_response",
                                outcome="handled_non_2xx",
                                status_code=res.status_code,
                                target=target,
                            )
                        )
                        return FetchResult(FetchStatus.ERROR, detail=f"HTTP {res.status_code}")
                    chunks = []
                    for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                        if cancel is not None:
                            cancel.raise_if_cancelled(target)
                        if chunk:
                            chunks.append(chunk)
                    content = b"".join(chunks)
            except requests.Timeout:
                logger.warning("%s request timed out after %s seconds", target, self.timeout)
                return FetchResult(FetchStatus.ERROR, detail="timeout")
            except requests.RequestException as exc:  # includes ConnectionError
                logger.warning("%s connection error: %s", target, exc)
                return FetchResult(FetchStatus.ERROR, detail=str(exc))

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response ok",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        outcome="success",
                        status_code=200,
                        size=len(content),
                        duration_ms=t.duration_ms(),
                        target=target,
                    )
                )
            return FetchResult(FetchStatus.FOUND, content=content)
