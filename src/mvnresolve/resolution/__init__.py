"""Resolution engine package.

- state.py: per-run queue, resource map, exclusions and scanned markers
- engine.py: fixed-point drain/expand resolution over a CacheGateway
"""

from .engine import MavenResolver, ResourceMap, resolve
from .state import CancelToken, ResolutionState

__all__ = [
    "CancelToken",
    "MavenResolver",
    "ResolutionState",
    "ResourceMap",
    "resolve",
]
