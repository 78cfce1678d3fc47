from __future__ import annotations

import os
import time
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from .config import RunConfig
from .errors import AuthenticationError, InvalidProjectError, NotDeployedError, SandboxLayoutError, StateBucketError
from .logging_utils import get_logger
from .manifest import patched_manifest
from .retry_utils import retry
from . import (
    exit_codes,
    gcp_auth,
    gcp_project,
    gcp_gcs,
    telemetry,
    terraform,
)


logger = get_logger(__name__)

AUTH_ATTEMPTS = 2
STATE_ATTEMPTS = 3
RESET_DELAY_SECONDS = 5.0

ConfirmFn = Callable[[str], bool]


# -----------------------------
# 사전 검증
# -----------------------------
def _require_auth(cfg: RunConfig) -> None:
    # 성공한 자격 증명은 캐시되어 이후 GCS / Pub/Sub 클라이언트가 재사용한다.
    if not retry(AUTH_ATTEMPTS, gcp_auth.credentials, verbose=cfg.verbose):
        raise AuthenticationError(
            "Could not get gcloud credentials.",
            hint="Run `gcloud auth login` and try again.",
        )


def _require_project(project_id: str, verbose: bool) -> None:
    if not gcp_project.project_exists(project_id, verbose=verbose):
        raise InvalidProjectError(
            f"Project '{project_id}' was not found. Please provide a valid project ID.",
        )


def _require_sandbox_layout(cfg: RunConfig) -> None:
    """
    state 버킷/오브젝트를 건드리기 전에 로컬 저장소 구조(terraform/, 매니페스트)를 확인한다.
    """
    missing = [p for p in (cfg.terraform_dir, cfg.manifest_path) if not os.path.exists(p)]
    if missing:
        raise SandboxLayoutError(
            "Cloud Ops Sandbox repository files not found: " + ", ".join(missing),
            hint="Run from the sandbox repository root or pass it with -C/--chdir.",
        )


def validate_create(cfg: RunConfig, confirm: ConfirmFn) -> Optional[RunConfig]:
    """
    create 사전 검증. 프로젝트가 확정된 새 RunConfig 를 반환한다.
    사용자가 기본 프로젝트 사용을 거절하면 None.
    """
    _require_sandbox_layout(cfg)
    _require_auth(cfg)

    if cfg.project_id:
        _require_project(cfg.project_id, cfg.verbose)
        return cfg

    project_id = gcp_project.default_project(verbose=cfg.verbose)
    if not project_id:
        raise InvalidProjectError(
            "No project ID given and no default gcloud project is configured. "
            "Please provide a valid project ID with --project-id.",
        )
    if not confirm(f"Deploy Cloud Ops Sandbox to project '{project_id}'?"):
        logger.info("사용자가 기본 프로젝트 사용을 거절했습니다: %s", project_id)
        return None
    return replace(cfg, project_id=project_id)


def validate_delete(cfg: RunConfig) -> RunConfig:
    """
    delete 사전 검증. project_id 누락은 외부 호출 전에 실패한다.
    """
    if not cfg.project_id:
        raise InvalidProjectError("Missing --project-id. Please provide a valid project ID.")

    _require_sandbox_layout(cfg)
    _require_auth(cfg)
    _require_project(cfg.project_id, cfg.verbose)

    if not gcp_gcs.object_exists(cfg.state_uri, project_id=cfg.project_id):
        raise NotDeployedError(
            f"Cloud Ops Sandbox is not deployed in project '{cfg.project_id}' "
            f"(state not found at {cfg.state_uri}).",
        )
    return cfg


# -----------------------------
# state 준비
# -----------------------------
def _ensure_bucket(cfg: RunConfig) -> bool:
    if gcp_gcs.bucket_exists(cfg.bucket_name, project_id=cfg.project_id):
        logger.info("기존 state 버킷을 사용합니다: gs://%s", cfg.bucket_name)
        return True
    return gcp_gcs.create_bucket(cfg.bucket_name, project_id=cfg.project_id or "")


def prepare_state(cfg: RunConfig, reset: bool) -> None:
    """
    state 버킷을 준비하고, reset=True 이면 기존 state 오브젝트를 지운다.
    """
    if not retry(STATE_ATTEMPTS, _ensure_bucket, cfg):
        raise StateBucketError(f"Failed to create state bucket gs://{cfg.bucket_name}.")

    if reset and gcp_gcs.object_exists(cfg.state_uri, project_id=cfg.project_id):
        logger.warning(
            "기존 Terraform state 가 있습니다. %.0f초 후 삭제하고 새로 배포합니다: %s",
            RESET_DELAY_SECONDS,
            cfg.state_uri,
        )
        time.sleep(RESET_DELAY_SECONDS)
        if not retry(STATE_ATTEMPTS, gcp_gcs.delete_object, cfg.state_uri, project_id=cfg.project_id):
            raise StateBucketError(f"Failed to delete stale state {cfg.state_uri}.")

    terraform.clear_local_cache(cfg)
    terraform.write_variables_file(cfg)


def _remove_vars_file(cfg: RunConfig) -> None:
    if cfg.vars_file and os.path.exists(cfg.vars_file):
        os.remove(cfg.vars_file)


# -----------------------------
# 실행
# -----------------------------
def _init_backend(cfg: RunConfig) -> int:
    result = terraform.init(cfg)
    if not result.ok:
        logger.error("Terraform init failed (exit=%s). gs://%s 접근 권한을 확인하세요.", result.returncode, cfg.bucket_name)
    return result.returncode


def launch_instructions(cfg: RunConfig, external_ip: Optional[str]) -> str:
    pid = cfg.project_id
    app_url = f"http://{external_ip}" if external_ip else "(external IP not yet available, see `terraform output`)"
    lines: List[str] = []
    lines.append("*" * 80)
    lines.append("Cloud Ops Sandbox deployed successfully!")
    lines.append("")
    lines.append("Explore Cloud Ops Sandbox features by browsing:")
    lines.append("")
    lines.append(f"  GKE Dashboard: https://console.cloud.google.com/kubernetes/workload?project={pid}")
    lines.append(f"  Monitoring Workspace: https://console.cloud.google.com/monitoring?project={pid}")
    lines.append(f"  Online Boutique web application: {app_url}")
    lines.append("*" * 80)
    return "\n".join(lines)


def create(cfg: RunConfig, confirm: ConfirmFn) -> Tuple[int, str]:
    """
    Cloud Ops Sandbox 를 배포한다.

    Returns:
        exit_code: 0 이면 성공, 그 외에는 실패한 terraform 명령의 종료 코드
        summary: 사람이 읽기 좋은 결과 텍스트
    """
    resolved = validate_create(cfg, confirm)
    if resolved is None:
        return exit_codes.SUCCESS, "Aborted. Nothing was deployed."
    cfg = resolved

    logger.info("배포 대상: project=%s prefix=%s", cfg.project_id, cfg.terraform_prefix or "-")
    try:
        prepare_state(cfg, reset=True)
        with patched_manifest(cfg):
            rc = _init_backend(cfg)
            if rc != exit_codes.SUCCESS:
                return rc, "Terraform init failed."
            result = terraform.apply(cfg)
            if not result.ok:
                return result.returncode, "Terraform apply failed."
            external_ip = terraform.output(cfg, terraform.EXTERNAL_IP_OUTPUT)
    finally:
        _remove_vars_file(cfg)

    telemetry.send_event(cfg, "create")
    return exit_codes.SUCCESS, launch_instructions(cfg, external_ip)


def delete(cfg: RunConfig) -> Tuple[int, str]:
    """
    Terraform state 가 있는 배포를 삭제한다.
    """
    cfg = validate_delete(cfg)

    logger.info("삭제 대상: project=%s prefix=%s", cfg.project_id, cfg.terraform_prefix or "-")
    try:
        prepare_state(cfg, reset=False)
        with patched_manifest(cfg):
            rc = _init_backend(cfg)
            if rc != exit_codes.SUCCESS:
                return rc, "Terraform init failed."
            result = terraform.destroy(cfg)
            if not result.ok:
                return result.returncode, "Terraform destroy failed."
    finally:
        _remove_vars_file(cfg)

    telemetry.send_event(cfg, "delete")
    return exit_codes.SUCCESS, f"Cloud Ops Sandbox was deleted from project '{cfg.project_id}'."
