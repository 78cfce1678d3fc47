from __future__ import annotations

from typing import Dict, List

import pytest
from google.api_core.exceptions import Conflict, NotFound

from sandboxctl import gcp_auth, gcp_gcs, gcp_project
from sandboxctl.subprocess_utils import RunResult


def test_parse_gs_uri() -> None:
    assert gcp_gcs.parse_gs_uri("gs://b/p1/default.tfstate") == ("b", "p1/default.tfstate")
    assert gcp_gcs.parse_gs_uri("gs://b/default.tfstate") == ("b", "default.tfstate")
    with pytest.raises(ValueError):
        gcp_gcs.parse_gs_uri("s3://b/x")


class _FakeBlob:
    def __init__(self, store: Dict[str, set], bucket: str, name: str) -> None:
        self._store, self._bucket, self._name = store, bucket, name

    def exists(self) -> bool:
        return self._name in self._store.get(self._bucket, set())

    def delete(self) -> None:
        if not self.exists():
            raise NotFound("missing")
        self._store[self._bucket].discard(self._name)


class _FakeBucket:
    def __init__(self, store: Dict[str, set], name: str) -> None:
        self._store, self._name = store, name

    def exists(self) -> bool:
        return self._name in self._store

    def blob(self, name: str) -> _FakeBlob:
        return _FakeBlob(self._store, self._name, name)


class _FakeClient:
    def __init__(self, store: Dict[str, set]) -> None:
        self.store = store

    def bucket(self, name: str) -> _FakeBucket:
        return _FakeBucket(self.store, name)

    def create_bucket(self, name: str, project: str | None = None) -> None:  # noqa: ARG002
        if name in self.store:
            raise Conflict("exists")
        self.store[name] = set()


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> Dict[str, set]:
    data: Dict[str, set] = {}
    monkeypatch.setattr(gcp_gcs, "_client", lambda project_id=None: _FakeClient(data))
    return data


def test_bucket_create_and_exists(store: Dict[str, set]) -> None:
    assert not gcp_gcs.bucket_exists("b")
    assert gcp_gcs.create_bucket("b", project_id="abc")
    assert gcp_gcs.bucket_exists("b")
    # 이미 있으면 Conflict 를 성공으로 처리
    assert gcp_gcs.create_bucket("b", project_id="abc")


def test_object_exists_and_delete(store: Dict[str, set]) -> None:
    store["b"] = {"p1/default.tfstate"}

    assert gcp_gcs.object_exists("gs://b/p1/default.tfstate")
    assert not gcp_gcs.object_exists("gs://b/default.tfstate")
    assert gcp_gcs.delete_object("gs://b/p1/default.tfstate")
    assert not gcp_gcs.object_exists("gs://b/p1/default.tfstate")
    # 이미 없어도 성공
    assert gcp_gcs.delete_object("gs://b/p1/default.tfstate")


def _fake_run(results: Dict[str, RunResult], calls: List[list[str]]):  # noqa: ANN202
    def run(cmd, **kwargs):  # noqa: ANN001, ANN003
        calls.append(list(cmd))
        return results[cmd[1]]

    return run


def test_project_exists_matches_exact_id(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[list[str]] = []
    results = {"projects": RunResult(returncode=0, stdout="abc\nabc-other\n", stderr="")}
    monkeypatch.setattr(gcp_project, "run_command", _fake_run(results, calls))

    assert gcp_project.project_exists("abc")
    assert not gcp_project.project_exists("ab")
    assert "--filter=project_id:abc" in calls[0]


def test_project_exists_false_when_gcloud_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    results = {"projects": RunResult(returncode=1, stdout="", stderr="ERROR")}
    monkeypatch.setattr(gcp_project, "run_command", _fake_run(results, []))

    assert not gcp_project.project_exists("abc")


@pytest.mark.parametrize("stdout, expected", [("my-proj\n", "my-proj"), ("(unset)\n", None), ("", None)])
def test_default_project(monkeypatch: pytest.MonkeyPatch, stdout: str, expected: str | None) -> None:
    results = {"config": RunResult(returncode=0, stdout=stdout, stderr="")}
    monkeypatch.setattr(gcp_project, "run_command", _fake_run(results, []))

    assert gcp_project.default_project() == expected


def test_auth_token(monkeypatch: pytest.MonkeyPatch) -> None:
    results = {"auth": RunResult(returncode=0, stdout="ya29.token\n", stderr="")}
    monkeypatch.setattr(gcp_auth, "run_command", _fake_run(results, []))

    assert gcp_auth.auth_token() == "ya29.token"
    creds = gcp_auth.credentials()
    assert creds is not None
    assert creds.token == "ya29.token"


def test_auth_token_missing_when_not_logged_in(monkeypatch: pytest.MonkeyPatch) -> None:
    results = {"auth": RunResult(returncode=1, stdout="", stderr="You do not currently have an active account")}
    monkeypatch.setattr(gcp_auth, "run_command", _fake_run(results, []))

    assert gcp_auth.auth_token() is None
    assert gcp_auth.credentials() is None


def test_credentials_fetch_gcloud_token_once_per_run(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[list[str]] = []
    results = {"auth": RunResult(returncode=0, stdout="ya29.token\n", stderr="")}
    monkeypatch.setattr(gcp_auth, "run_command", _fake_run(results, calls))

    first = gcp_auth.credentials()
    second = gcp_auth.credentials()

    assert first is second
    assert len(calls) == 1

    gcp_auth.reset_credentials()
    gcp_auth.credentials()
    assert len(calls) == 2


def test_credentials_failure_is_not_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[list[str]] = []
    results = {"auth": RunResult(returncode=1, stdout="", stderr="ERROR")}
    monkeypatch.setattr(gcp_auth, "run_command", _fake_run(results, calls))

    assert gcp_auth.credentials() is None
    results["auth"] = RunResult(returncode=0, stdout="ya29.token\n", stderr="")
    assert gcp_auth.credentials() is not None
    assert len(calls) == 2
