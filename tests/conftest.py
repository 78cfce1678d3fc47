"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 sandboxctl 패키지가 존재할 때,
`pytest` 실행 시 site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.

테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


MANIFEST_TEXT = """\
apiVersion: kustomize.config.k8s.io/v1beta1
kind: Kustomization
resources:
- github.com/GoogleCloudPlatform/microservices-demo/kustomize/base?ref=v0.8.0
components:
# - github.com/GoogleCloudPlatform/microservices-demo/kustomize/components/without-loadgenerator?ref=v0.8.0
# - ../components/service-mesh-istio
"""


@pytest.fixture
def sandbox_root(tmp_path: Path) -> Path:
    """terraform/ 와 kustomize 매니페스트를 가진 가짜 Cloud Ops Sandbox 저장소."""
    (tmp_path / "terraform").mkdir()
    manifest_dir = tmp_path / "kustomize" / "online-boutique"
    manifest_dir.mkdir(parents=True)
    (manifest_dir / "kustomization.yaml").write_text(MANIFEST_TEXT, encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SANDBOX_SKIP_TELEMETRY", "SANDBOX_NODE_POOL", "SANDBOX_SESSION"):
        monkeypatch.delenv(name, raising=False)
    from sandboxctl import gcp_auth

    gcp_auth.reset_credentials()
