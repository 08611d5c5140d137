"""Maven version ordering.

A version is split into dot-separated numeric segments (padded to at least
four) and a trailing qualifier introduced by ``-``. Qualifiers go through a
fixed alias table: ``""``, ``release`` and ``ga`` are the release marker,
``sp`` is the service-pack marker, and ``cr``/``alpha``/``beta``/``milestone``
shorten to ``rc``/``a``/``b``/``m``. Named qualifiers sort below the release
marker, which sorts below the service-pack marker; named qualifiers compare
lexically among themselves.

Only the first dash-separated token of a qualifier goes through the alias
table; anything after it breaks ties within that token, so ``1.0-alpha-1``
sorts after ``1.0-alpha`` and before ``1.0-beta``. Numeric segments are ASCII
digits only; any other character starts the qualifier.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

NUMERIC_WIDTH = 4

# Qualifier ranks: named pre-release < release < service pack
_NAMED = 0
_RELEASE = 1
_SERVICE_PACK = 2

_QUALIFIER_ALIASES: Dict[str, object] = {
    "": _RELEASE,
    "release": _RELEASE,
    "ga": _RELEASE,
    "sp": _SERVICE_PACK,
    "cr": "rc",
    "alpha": "a",
    "beta": "b",
    "milestone": "m",
}


@dataclass(frozen=True)
class MavenVersion:
    """Parsed version: numeric segments plus a ranked qualifier."""
    raw: str
    numbers: Tuple[int, ...]
    qualifier: Tuple[int, str]

    @property
    def sort_key(self) -> Tuple[Tuple[int, ...], Tuple[int, str]]:
        # Trailing zeros are insignificant: 1.0 == 1.0.0.0
        numbers = list(self.numbers)
        while numbers and numbers[-1] == 0:
            numbers.pop()
        return tuple(numbers), self.qualifier


def _qualifier_key(token: str) -> Tuple[int, str]:
    # Only the first dash-token is aliased; the rest orders within it
    head, _, rest = token.partition("-")
    alias = _QUALIFIER_ALIASES.get(head, head)
    if alias is _RELEASE or alias is _SERVICE_PACK:
        return alias, rest
    return _NAMED, f"{alias}-{rest}" if rest else str(alias)


def parse_version(raw: str) -> MavenVersion:
    """Split ``raw`` into numeric segments and a qualifier.

    A non-numeric dot segment starts the qualifier, so ``2.0.RELEASE`` parses
    like ``2.0-release``.
    """
    text = raw.strip().lower()
    main, has_dash, qualifier = text.partition("-")
    numbers: List[int] = []
    segments = main.split(".") if main else []
    for i, segment in enumerate(segments):
        if segment.isascii() and segment.isdigit():
            numbers.append(int(segment))
            continue
        head = ".".join(segments[i:])
        qualifier = f"{head}-{qualifier}" if has_dash else head
        break
    while len(numbers) < NUMERIC_WIDTH:
        numbers.append(0)
    return MavenVersion(raw=raw, numbers=tuple(numbers), qualifier=_qualifier_key(qualifier))


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


class VersionCache:
    """Memoizes parsed versions; one instance belongs to one resolution run."""

    def __init__(self) -> None:
        self._parsed: Dict[str, MavenVersion] = {}

    def __len__(self) -> int:
        return len(self._parsed)

    def parse(self, raw: str) -> MavenVersion:
        parsed = self._parsed.get(raw)
        if parsed is None:
            parsed = parse_version(raw)
            self._parsed[raw] = parsed
        return parsed

    def compare(self, a: str, b: str) -> int:
        return _cmp(self.parse(a).sort_key, self.parse(b).sort_key)


def compare_versions(a: str, b: str, cache: Optional[VersionCache] = None) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, equal to, or after ``b``."""
    if cache is not None:
        return cache.compare(a, b)
    return _cmp(parse_version(a).sort_key, parse_version(b).sort_key)


def sort_versions(
    versions: Iterable[str],
    cache: Optional[VersionCache] = None,
    reverse: bool = False,
) -> List[str]:
    """Return ``versions`` ordered by ``compare_versions``."""
    if cache is None:
        cache = VersionCache()
    return sorted(versions, key=functools.cmp_to_key(cache.compare), reverse=reverse)

