from __future__ import annotations

import os
import tempfile
import uuid
from dataclasses import dataclass, field
from typing import Optional, List

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env", ".env.sandbox"]

STATE_BUCKET_SUFFIX = "-cloud-ops-sandbox-tf-state"
STATE_OBJECT_NAME = "default.tfstate"

TERRAFORM_DIR = "terraform"
MANIFEST_PATH = os.path.join("kustomize", "online-boutique", "kustomization.yaml")

ENV_SKIP_TELEMETRY = "SANDBOX_SKIP_TELEMETRY"
ENV_NODE_POOL = "SANDBOX_NODE_POOL"
ENV_SESSION = "SANDBOX_SESSION"


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    이미 프로세스 환경변수에 있는 키는 덮어쓰지 않는다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=False)


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y"}


def _new_vars_file() -> str:
    # 파일은 prepare 단계에서 생성한다.
    return os.path.join(tempfile.gettempdir(), f"cloud-ops-sandbox-{uuid.uuid4().hex}.tfvars")


def state_bucket_name(project_id: str) -> str:
    return f"{project_id}{STATE_BUCKET_SUFFIX}"


def state_object_name(prefix: str = "") -> str:
    """
    버킷 내부의 state 오브젝트 이름. prefix 가 없으면 버킷 루트에 위치한다.
    """
    prefix = prefix.strip("/")
    if prefix:
        return f"{prefix}/{STATE_OBJECT_NAME}"
    return STATE_OBJECT_NAME


def state_object_uri(project_id: str, prefix: str = "") -> str:
    return f"gs://{state_bucket_name(project_id)}/{state_object_name(prefix)}"


@dataclass(frozen=True)
class RunConfig:
    # 대상
    project_id: Optional[str] = None
    cluster_name: Optional[str] = None
    cluster_location: Optional[str] = None
    terraform_prefix: str = ""

    # 토글
    verbose: bool = False
    skip_loadgenerator: bool = False
    skip_asm: bool = False
    skip_telemetry: bool = False

    # env 기반 override
    node_pool: Optional[str] = None
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    base_dir: str = "."
    vars_file: str = ""

    @property
    def terraform_dir(self) -> str:
        return os.path.join(self.base_dir, TERRAFORM_DIR)

    @property
    def manifest_path(self) -> str:
        return os.path.abspath(os.path.join(self.base_dir, MANIFEST_PATH))

    @property
    def bucket_name(self) -> str:
        if not self.project_id:
            raise ValueError("project_id 가 확정되지 않아 버킷 이름을 계산할 수 없습니다.")
        return state_bucket_name(self.project_id)

    @property
    def state_uri(self) -> str:
        if not self.project_id:
            raise ValueError("project_id 가 확정되지 않아 state 경로를 계산할 수 없습니다.")
        return state_object_uri(self.project_id, self.terraform_prefix)

    @classmethod
    def from_options(
        cls,
        *,
        project_id: Optional[str] = None,
        cluster_name: Optional[str] = None,
        cluster_location: Optional[str] = None,
        terraform_prefix: Optional[str] = None,
        verbose: bool = False,
        skip_loadgenerator: bool = False,
        skip_asm: bool = False,
        base_dir: str = ".",
    ) -> "RunConfig":
        """
        CLI 옵션과 환경변수(.env 포함)를 합쳐 실행 설정을 한 번 만든다.
        """
        session = os.getenv(ENV_SESSION) or str(uuid.uuid4())

        return cls(
            project_id=project_id or None,
            cluster_name=cluster_name or None,
            cluster_location=cluster_location or None,
            terraform_prefix=(terraform_prefix or "").strip("/"),
            verbose=verbose,
            skip_loadgenerator=skip_loadgenerator,
            skip_asm=skip_asm,
            skip_telemetry=_get_bool(ENV_SKIP_TELEMETRY, False),
            node_pool=os.getenv(ENV_NODE_POOL) or None,
            session_id=session,
            base_dir=base_dir,
            vars_file=_new_vars_file(),
        )
