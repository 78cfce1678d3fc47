"""
terraform
---------

terraform CLI(init/apply/destroy/output) 래퍼와
tfvars 파일 생성을 담당하는 모듈.
"""

from __future__ import annotations

import json
import os
import shutil
from typing import List, Optional

from .config import RunConfig
from .logging_utils import get_logger
from .subprocess_utils import RunResult, run_command


logger = get_logger(__name__)

EXTERNAL_IP_OUTPUT = "frontend_external_ip"


def _hcl_string(value: str) -> str:
    return json.dumps(value)


def render_variables(cfg: RunConfig) -> str:
    """
    Terraform 변수 파일(HCL) 내용을 만든다.
    """
    lines: List[str] = [
        f"state_bucket_name = {_hcl_string(cfg.bucket_name)}",
        f"state_prefix = {_hcl_string(cfg.terraform_prefix)}",
        f"gcp_project_id = {_hcl_string(cfg.project_id or '')}",
        f"filepath_manifest = {_hcl_string(cfg.manifest_path)}",
    ]
    if cfg.cluster_name:
        lines.append(f"gke_cluster_name = {_hcl_string(cfg.cluster_name)}")
    if cfg.cluster_location:
        lines.append(f"gke_cluster_location = {_hcl_string(cfg.cluster_location)}")
    lines.append(f"enable_asm = {'false' if cfg.skip_asm else 'true'}")
    if cfg.node_pool:
        # HCL object 그대로 전달
        lines.append(f"gke_node_pool = {cfg.node_pool.strip()}")
    return "\n".join(lines) + "\n"


def write_variables_file(cfg: RunConfig) -> str:
    with open(cfg.vars_file, "w", encoding="utf-8") as f:
        f.write(render_variables(cfg))
    logger.debug("Terraform 변수 파일 생성: %s", cfg.vars_file)
    return cfg.vars_file


def clear_local_cache(cfg: RunConfig) -> None:
    """
    이전 실행에서 남은 .terraform 디렉토리(backend 설정 캐시)를 지운다.
    """
    cache_dir = os.path.join(cfg.terraform_dir, ".terraform")
    if os.path.isdir(cache_dir):
        logger.debug("로컬 Terraform 캐시 삭제: %s", cache_dir)
        shutil.rmtree(cache_dir)


def _terraform(cfg: RunConfig, *args: str, stream_output: bool = False) -> RunResult:
    return run_command(
        ["terraform", *args],
        cwd=cfg.terraform_dir,
        verbose=cfg.verbose,
        stream_output=stream_output,
    )


def init(cfg: RunConfig) -> RunResult:
    args = [
        "init",
        "-input=false",
        "-reconfigure",
        "-lock=false",
        f"-backend-config=bucket={cfg.bucket_name}",
    ]
    if cfg.terraform_prefix:
        args.append(f"-backend-config=prefix={cfg.terraform_prefix}")
    logger.info("Terraform backend 초기화: gs://%s (prefix=%s)", cfg.bucket_name, cfg.terraform_prefix or "-")
    return _terraform(cfg, *args, stream_output=True)


def apply(cfg: RunConfig) -> RunResult:
    logger.info("Terraform apply 실행")
    return _terraform(
        cfg,
        "apply",
        "-input=false",
        "-auto-approve",
        "-lock=false",
        f"-var-file={cfg.vars_file}",
        stream_output=True,
    )


def destroy(cfg: RunConfig) -> RunResult:
    logger.info("Terraform destroy 실행")
    return _terraform(
        cfg,
        "destroy",
        "-input=false",
        "-auto-approve",
        "-lock=false",
        f"-var-file={cfg.vars_file}",
        stream_output=True,
    )


def output(cfg: RunConfig, key: str) -> Optional[str]:
    result = _terraform(cfg, "output", "-raw", key)
    value = result.stdout.strip()
    if not result.ok or not value:
        logger.warning("Terraform output 조회 실패: %s (exit=%s)", key, result.returncode)
        return None
    return value
