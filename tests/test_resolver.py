"""Tests for the fixed-point resolution engine."""
import threading

import pytest

from mvnresolve.common.http_client import FetchResult, FetchStatus
from mvnresolve.errors import (
    CacheWriteError,
    DecodeError,
    InputFormatError,
    NotFoundError,
    Phase,
    ResolutionCancelled,
)
from mvnresolve.registry.maven.gateway import CacheGateway
from mvnresolve.resolution import CancelToken, MavenResolver
from mvnresolve.versioning.models import ResolutionMode

from conftest import FakeRepository, pom_relpath


@pytest.fixture
def resolver(gateway):
    return MavenResolver(gateway)


def versions(resources):
    return {key: pom.version for key, pom in resources.items()}


def test_end_to_end_metadata_only(repo, resolver):
    repo.add_pom("g", "a", "1.0", deps=[("g", "b", "[2.0]", "compile")])
    repo.add_pom("g", "b", "2.0")

    resources = resolver.resolve(["g:a:1.0"])

    assert set(resources) == {("g", "a"), ("g", "b")}
    assert resources[("g", "a")].version == "1.0"
    assert resources[("g", "a")].packaging == "jar"
    assert resources[("g", "b")].version == "2.0"
    assert resources[("g", "b")].packaging == "jar"
    assert not any(p.endswith(".jar") for p in repo.requests)


def test_same_id_same_version_fetched_once(repo, resolver):
    repo.add_pom("g", "root", "1", deps=[("g", "left", "1"), ("g", "right", "1")])
    repo.add_pom("g", "left", "1", deps=[("g", "shared", "1.0")])
    repo.add_pom("g", "right", "1", deps=[("g", "shared", "1.0")])
    shared = repo.add_pom("g", "shared", "1.0")

    resolver.resolve(["g:root:1"])

    assert repo.requests.count(shared) == 1


def test_later_higher_version_upgrades_entry(repo, resolver):
    repo.add_pom("g", "root", "1", deps=[("g", "left", "1"), ("g", "right", "1")])
    repo.add_pom("g", "left", "1", deps=[("g", "shared", "1.0")])
    repo.add_pom("g", "right", "1", deps=[("g", "mid", "1")])
    repo.add_pom("g", "mid", "1", deps=[("g", "shared", "2.0")])
    repo.add_pom("g", "shared", "1.0")
    repo.add_pom("g", "shared", "2.0")

    resources = resolver.resolve(["g:root:1"])

    assert resources[("g", "shared")].version == "2.0"


def test_lower_version_after_higher_is_skipped(repo, resolver):
    repo.add_pom("g", "root", "1", deps=[("g", "shared", "2.0"), ("g", "other", "1")])
    repo.add_pom("g", "other", "1", deps=[("g", "shared", "1.0")])
    repo.add_pom("g", "shared", "2.0")

    resources = resolver.resolve(["g:root:1"])

    assert resources[("g", "shared")].version == "2.0"
    assert pom_relpath("g", "shared", "1.0") not in repo.requests


def test_upgrade_does_not_retract_edges_of_superseded_version(repo, resolver):
    repo.add_pom("g", "root", "1", deps=[("g", "lib", "1.0"), ("g", "bridge", "1")])
    repo.add_pom("g", "lib", "1.0", deps=[("g", "legacy", "1")])
    repo.add_pom("g", "bridge", "1", deps=[("g", "lib", "2.0")])
    repo.add_pom("g", "lib", "2.0")
    repo.add_pom("g", "legacy", "1")

    resources = resolver.resolve(["g:root:1"])

    assert resources[("g", "lib")].version == "2.0"
    assert ("g", "legacy") in resources


def test_test_and_provided_scopes_are_not_followed(repo, resolver):
    repo.add_pom("g", "a", "1", deps=[
        ("g", "t", "1", "test"),
        ("g", "p", "1", "provided"),
        ("g", "s", "1", "system"),
        ("g", "r", "1", "runtime"),
        ("g", "odd", "1", "bogus"),
    ])
    repo.add_pom("g", "r", "1")

    resources = resolver.resolve(["g:a:1"])

    assert set(resources) == {("g", "a"), ("g", "r")}
    assert all("/t/" not in p and "/p/" not in p for p in repo.requests)


def test_exclusion_applies_to_later_discovered_edges(repo, resolver):
    repo.add_pom("g", "root", "1", deps=[
        ("g", "first", "1", "compile", [("logging", "commons-logging")]),
        ("g", "second", "1"),
    ])
    repo.add_pom("g", "first", "1", deps=[("commons-logging", "commons-logging", "1.2")])
    repo.add_pom("g", "second", "1", deps=[("g", "deep", "1")])
    repo.add_pom("g", "deep", "1", deps=[("org.commons-logging", "commons-logging", "1.1")])

    resources = resolver.resolve(["g:root:1"])

    assert set(resources) == {("g", "root"), ("g", "first"), ("g", "second"), ("g", "deep")}
    assert not any("commons-logging" in p for p in repo.requests)


def test_wildcard_exclusion(repo, resolver):
    repo.add_pom("g", "root", "1", deps=[("g", "a", "1", "compile", [("*", "*")])])
    repo.add_pom("g", "a", "1", deps=[("x", "y", "1")])

    resources = resolver.resolve(["g:root:1"])

    assert set(resources) == {("g", "root"), ("g", "a")}


def test_packaging_pom_and_download_mode(repo, gateway, store):
    repo.add_pom("g", "a", "1.0", deps=[("g", "b", "2.0")])
    repo.add_pom("g", "b", "2.0", packaging="war")
    repo.files[pom_relpath("g", "a", "1.0", "jar")] = b"jar-a"
    repo.files[pom_relpath("g", "b", "2.0", "war")] = b"war-b"

    resources = MavenResolver(gateway).resolve(["g:a:1.0"], mode=ResolutionMode.WITH_DOWNLOAD)

    assert resources[("g", "b")].packaging == "war"
    assert store.read_bytes(pom_relpath("g", "a", "1.0", "jar")) == b"jar-a"
    assert store.read_bytes(pom_relpath("g", "b", "2.0", "war")) == b"war-b"


def test_missing_artifact_in_download_mode_is_fatal(repo, resolver):
    repo.add_pom("g", "a", "1.0")
    with pytest.raises(NotFoundError) as exc_info:
        resolver.resolve(["g:a:1.0"], mode=ResolutionMode.WITH_DOWNLOAD)
    assert exc_info.value.phase is Phase.ARTIFACT_DOWNLOAD
    assert exc_info.value.coordinate == "g:a:1.0"


def test_missing_metadata_is_fatal(repo, resolver):
    repo.add_pom("g", "a", "1.0", deps=[("g", "ghost", "1")])
    with pytest.raises(NotFoundError) as exc_info:
        resolver.resolve(["g:a:1.0"])
    assert exc_info.value.phase is Phase.METADATA_FETCH
    assert exc_info.value.coordinate == "g:ghost:1"


def test_decode_failure_is_fatal(repo, resolver):
    repo.files[pom_relpath("g", "a", "1")] = b"<metadata/>"
    with pytest.raises(DecodeError) as exc_info:
        resolver.resolve(["g:a:1"])
    assert exc_info.value.phase is Phase.DECODE
    assert exc_info.value.coordinate == "g:a:1"


def test_version_range_is_rejected_during_expansion(repo, resolver):
    repo.add_pom("g", "a", "1", deps=[("g", "b", "[1.0,2.0)")])
    with pytest.raises(DecodeError) as exc_info:
        resolver.resolve(["g:a:1"])
    assert exc_info.value.phase is Phase.EXPANSION


def test_unversioned_dependency_is_rejected_during_expansion(repo, resolver):
    repo.add_pom("g", "a", "1", deps=[("g", "b", None)])
    with pytest.raises(DecodeError) as exc_info:
        resolver.resolve(["g:a:1"])
    assert exc_info.value.phase is Phase.EXPANSION
    assert exc_info.value.coordinate == "g:a:1"


@pytest.mark.parametrize("version", ["../x", "..", "1/../../2"])
def test_path_characters_in_dependency_version_rejected_during_expansion(repo, resolver, version):
    repo.add_pom("g", "a", "1", deps=[("g", "b", version)])
    with pytest.raises(DecodeError) as exc_info:
        resolver.resolve(["g:a:1"])
    assert exc_info.value.phase is Phase.EXPANSION
    assert exc_info.value.coordinate == "g:a:1"
    assert repo.pom_requests() == [pom_relpath("g", "a", "1")]


def test_path_escaping_seed_is_input_error(resolver, repo):
    with pytest.raises(InputFormatError):
        resolver.resolve(["g:a:.."])
    assert repo.requests == []


def test_unversioned_test_dependency_is_ignored(repo, resolver):
    repo.add_pom("g", "a", "1", deps=[("g", "b", None, "test")])
    assert set(resolver.resolve(["g:a:1"])) == {("g", "a")}


def test_malformed_seed_is_input_error(resolver, repo):
    with pytest.raises(InputFormatError) as exc_info:
        resolver.resolve(["g:a:1", "broken"])
    assert "broken" in str(exc_info.value)
    assert repo.requests == []


def test_cache_write_failure_is_fatal(repo):
    class ReadOnlyStore:
        def read_bytes(self, relative_path):
            return None

        def write_bytes(self, relative_path, data):
            raise PermissionError("read-only")

    repo.add_pom("g", "a", "1")
    with pytest.raises(CacheWriteError):
        MavenResolver(CacheGateway(ReadOnlyStore(), [repo])).resolve(["g:a:1"])


def test_runs_are_independent(repo, resolver):
    repo.add_pom("g", "a", "1", deps=[("g", "b", "1", "compile", [("*", "c")])])
    repo.add_pom("g", "b", "1")
    repo.add_pom("g", "c", "1")
    repo.add_pom("g", "d", "1", deps=[("g", "c", "1")])

    resolver.resolve(["g:a:1"])
    resources = resolver.resolve(["g:d:1"])

    assert set(resources) == {("g", "d"), ("g", "c")}


def test_pre_cancelled_token_aborts(repo, resolver):
    repo.add_pom("g", "a", "1")
    token = CancelToken()
    token.cancel()
    with pytest.raises(ResolutionCancelled):
        resolver.resolve(["g:a:1"], cancel=token)
    assert repo.requests == []


def test_cancel_during_fetch_leaves_no_result(repo, gateway):
    token = CancelToken()
    repo.add_pom("g", "a", "1", deps=[("g", "b", "1")])
    repo.add_pom("g", "b", "1")

    class CancellingRepository(FakeRepository):
        def fetch(self, relative_path, cancel=None):
            if relative_path.endswith("b-1.pom"):
                token.cancel()
                cancel.raise_if_cancelled(relative_path)
            return super().fetch(relative_path, cancel)

    cancelling = CancellingRepository("cancelling", files=repo.files)
    with pytest.raises(ResolutionCancelled):
        MavenResolver(CacheGateway(gateway.store, [cancelling])).resolve(["g:a:1"], cancel=token)
    assert not gateway.store.exists(pom_relpath("g", "b", "1"))


class TestConcurrentResolution:
    """max_workers > 1 gives the same results as a sequential run."""

    def _populate(self, repo):
        repo.add_pom("g", "root", "1", deps=[("g", f"n{i}", "1") for i in range(6)])
        for i in range(6):
            repo.add_pom("g", f"n{i}", "1", deps=[("g", "shared", "1.0" if i % 2 else "2.0")])
        repo.add_pom("g", "shared", "1.0")
        repo.add_pom("g", "shared", "2.0")

    def test_matches_sequential(self, tmp_path):
        seq_repo, par_repo = FakeRepository("seq"), FakeRepository("par")
        self._populate(seq_repo)
        self._populate(par_repo)
        from mvnresolve.common.storage import LocalStore

        sequential = MavenResolver(CacheGateway(LocalStore(str(tmp_path / "s")), [seq_repo]))
        parallel = MavenResolver(CacheGateway(LocalStore(str(tmp_path / "p")), [par_repo]), max_workers=4)

        seq_result = sequential.resolve(["g:root:1"])
        par_result = parallel.resolve(["g:root:1"])

        assert versions(seq_result) == versions(par_result)
        assert list(seq_result) == list(par_result)
        assert par_result[("g", "shared")].version == "2.0"
        assert sorted(seq_repo.requests) == sorted(par_repo.requests)

    def test_error_in_parallel_batch_is_fatal(self, store):
        lock = threading.Lock()

        class FlakyRepository(FakeRepository):
            def fetch(self, relative_path, cancel=None):
                with lock:
                    self.requests.append(relative_path)
                if "bad" in relative_path:
                    return FetchResult(FetchStatus.ERROR, detail="boom")
                return FetchResult(FetchStatus.FOUND, content=self.files[relative_path])

        flaky = FlakyRepository("flaky")
        flaky.add_pom("g", "root", "1", deps=[("g", "good", "1"), ("g", "bad", "1")])
        flaky.add_pom("g", "good", "1")

        with pytest.raises(NotFoundError) as exc_info:
            MavenResolver(CacheGateway(store, [flaky]), max_workers=3).resolve(["g:root:1"])
        assert exc_info.value.coordinate == "g:bad:1"
