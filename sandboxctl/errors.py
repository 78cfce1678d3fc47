"""
sandboxctl 예외 계층.

CLI 경계(cli.py)까지 올라오는 예외는 모두 SandboxError 를 상속한다.

    SandboxError
    └── FatalError
        ├── AuthenticationError
        ├── InvalidProjectError
        ├── NotDeployedError
        ├── SandboxLayoutError
        └── StateBucketError
"""

from __future__ import annotations

from . import exit_codes


class SandboxError(Exception):
    """sandboxctl 의 모든 예외의 기반 클래스."""

    exit_code: int = 1

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint


class FatalError(SandboxError):
    """즉시 exit 2 로 종료해야 하는 검증 실패."""

    exit_code = exit_codes.FATAL


class AuthenticationError(FatalError):
    """gcloud 인증 토큰을 얻을 수 없음."""


class InvalidProjectError(FatalError):
    """프로젝트 ID 가 없거나 존재하지 않음."""


class NotDeployedError(FatalError):
    """delete 대상 프로젝트/prefix 에 Terraform state 가 없음."""


class SandboxLayoutError(FatalError):
    """terraform/ 디렉토리 또는 kustomize 매니페스트가 저장소 루트에 없음."""


class StateBucketError(FatalError):
    """state 버킷/오브젝트 준비 실패."""
