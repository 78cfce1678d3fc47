import dataclasses
import os

import pytest

from sandboxctl.config import RunConfig, load_env_files, state_bucket_name, state_object_uri


def test_state_object_uri_without_prefix() -> None:
    assert state_object_uri("abc") == "gs://abc-cloud-ops-sandbox-tf-state/default.tfstate"


def test_state_object_uri_with_prefix() -> None:
    assert state_object_uri("abc", "p1") == "gs://abc-cloud-ops-sandbox-tf-state/p1/default.tfstate"
    # 앞뒤 슬래시는 무시한다.
    assert state_object_uri("abc", "/p1/") == "gs://abc-cloud-ops-sandbox-tf-state/p1/default.tfstate"


def test_state_bucket_name_is_derived_from_project() -> None:
    assert state_bucket_name("my-proj") == "my-proj-cloud-ops-sandbox-tf-state"


def test_from_options_reads_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SANDBOX_SESSION", "session-123")
    monkeypatch.setenv("SANDBOX_NODE_POOL", '{ machine_type = "e2-standard-4" }')
    monkeypatch.setenv("SANDBOX_SKIP_TELEMETRY", "true")

    cfg = RunConfig.from_options(project_id="abc", terraform_prefix="p1")

    assert cfg.session_id == "session-123"
    assert cfg.node_pool == '{ machine_type = "e2-standard-4" }'
    assert cfg.skip_telemetry is True
    assert cfg.state_uri == "gs://abc-cloud-ops-sandbox-tf-state/p1/default.tfstate"
    assert cfg.vars_file.endswith(".tfvars")
    # 경로만 계산하고 파일은 만들지 않는다.
    assert not os.path.exists(cfg.vars_file)


def test_from_options_generates_session_id_when_not_set() -> None:
    a = RunConfig.from_options()
    b = RunConfig.from_options()

    assert a.session_id and b.session_id
    assert a.session_id != b.session_id
    assert a.skip_telemetry is False
    assert a.project_id is None


def test_run_config_is_immutable() -> None:
    cfg = RunConfig.from_options(project_id="abc")

    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.project_id = "other"  # type: ignore[misc]


def test_state_uri_requires_project() -> None:
    cfg = RunConfig.from_options()

    with pytest.raises(ValueError):
        _ = cfg.state_uri


def test_load_env_files_does_not_override_process_env(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text(
        "SANDBOX_SESSION=from-file\nSANDBOX_NODE_POOL=from-file\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SANDBOX_SESSION", "from-env")
    # load_dotenv 가 os.environ 에 직접 쓴 값도 테스트 종료 시 되돌린다.
    monkeypatch.setenv("SANDBOX_NODE_POOL", "placeholder")
    monkeypatch.delenv("SANDBOX_NODE_POOL")

    load_env_files(str(tmp_path))
    cfg = RunConfig.from_options()

    assert cfg.session_id == "from-env"
    assert cfg.node_pool == "from-file"
