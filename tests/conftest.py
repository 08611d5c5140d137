"""Shared fixtures: in-memory repositories and POM builders."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from mvnresolve.common.http_client import FetchResult, FetchStatus
from mvnresolve.common.storage import LocalStore
from mvnresolve.constants import Constants
from mvnresolve.registry.maven.gateway import CacheGateway


class FakeRepository:
    """Repository serving bytes from a dict and recording every requested path."""

    def __init__(self, name: str = "fake", files: Optional[Dict[str, bytes]] = None, errors: Iterable[str] = ()):
        self.name = name
        self.files: Dict[str, bytes] = dict(files or {})
        self.errors = set(errors)
        self.requests: List[str] = []

    def __repr__(self) -> str:
        return f"FakeRepository({self.name!r})"

    def fetch(self, relative_path, cancel=None):
        self.requests.append(relative_path)
        if relative_path in self.errors:
            return FetchResult(FetchStatus.ERROR, detail="boom")
        if relative_path in self.files:
            return FetchResult(FetchStatus.FOUND, content=self.files[relative_path])
        return FetchResult(FetchStatus.NOT_FOUND, detail="HTTP 404")

    def add_pom(self, group_id, artifact_id, version, deps=(), packaging=None, extra=""):
        path = pom_relpath(group_id, artifact_id, version)
        self.files[path] = make_pom(group_id, artifact_id, version, deps, packaging, extra)
        return path

    def pom_requests(self) -> List[str]:
        return [p for p in self.requests if p.endswith(".pom")]


def pom_relpath(group_id: str, artifact_id: str, version: str, ext: str = "pom") -> str:
    return f"{group_id.replace('.', '/')}/{artifact_id}/{version}/{artifact_id}-{version}.{ext}"


def _dependency_xml(dep) -> str:
    """dep is (g, a, v) or (g, a, v, scope) or (g, a, v, scope, [(eg, ea), ...])."""
    group_id, artifact_id, version = dep[0], dep[1], dep[2]
    scope = dep[3] if len(dep) > 3 else None
    exclusions: List[Tuple[str, str]] = list(dep[4]) if len(dep) > 4 else []
    parts = [f"<groupId>{group_id}</groupId>", f"<artifactId>{artifact_id}</artifactId>"]
    if version is not None:
        parts.append(f"<version>{version}</version>")
    if scope:
        parts.append(f"<scope>{scope}</scope>")
    if exclusions:
        parts.append("<exclusions>" + "".join(
            f"<exclusion><groupId>{eg}</groupId><artifactId>{ea}</artifactId></exclusion>"
            for eg, ea in exclusions
        ) + "</exclusions>")
    return "<dependency>" + "".join(parts) + "</dependency>"


def make_pom(group_id, artifact_id, version, deps=(), packaging=None, extra="") -> bytes:
    body = [
        "<modelVersion>4.0.0</modelVersion>",
        f"<groupId>{group_id}</groupId>",
        f"<artifactId>{artifact_id}</artifactId>",
        f"<version>{version}</version>",
    ]
    if packaging:
        body.append(f"<packaging>{packaging}</packaging>")
    body.append(extra)
    if deps:
        body.append("<dependencies>" + "".join(_dependency_xml(d) for d in deps) + "</dependencies>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project xmlns="http://maven.apache.org/POM/4.0.0">'
        + "".join(body)
        + "</project>"
    ).encode("utf-8")


@pytest.fixture
def repo():
    return FakeRepository("primary")


@pytest.fixture
def store(tmp_path):
    return LocalStore(str(tmp_path / "cache"))


@pytest.fixture
def gateway(store, repo):
    return CacheGateway(store, [repo])


@pytest.fixture(autouse=True)
def restore_constants():
    """Keep Constants mutations from leaking between tests."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield
    for key, value in saved.items():
        setattr(Constants, key, value)
