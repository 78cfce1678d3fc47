"""
gcp_project
-----------

GCP 프로젝트 존재 여부와 gcloud 기본 프로젝트 조회를 담당하는 모듈.
"""

from __future__ import annotations

from typing import Optional

from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)


def default_project(verbose: bool = False) -> Optional[str]:
    """
    `gcloud config get-value project` 로 현재 설정된 기본 프로젝트를 조회한다.
    """
    result = run_command(
        ["gcloud", "config", "get-value", "project", "--quiet"],
        verbose=verbose,
    )
    if not result.ok:
        return None
    value = result.stdout.strip()
    # 설정되지 않은 경우 gcloud 는 "(unset)" 을 출력하기도 한다.
    if not value or value == "(unset)":
        return None
    return value


def project_exists(project_id: str, verbose: bool = False) -> bool:
    """
    현재 계정으로 접근 가능한 프로젝트 목록에 project_id 가 있는지 확인한다.
    """
    logger.info("프로젝트 존재 여부 확인: %s", project_id)
    cmd = [
        "gcloud",
        "projects",
        "list",
        f"--filter=project_id:{project_id}",
        "--format=value(project_id)",
        "--quiet",
    ]
    result = run_command(cmd, verbose=verbose)
    if not result.ok:
        logger.warning("프로젝트 목록 조회 실패 (exit=%s)", result.returncode)
        return False
    found = {line.strip() for line in result.stdout.splitlines() if line.strip()}
    return project_id in found
