"""
CLI 종료 코드 상수.
"""

from __future__ import annotations

SUCCESS: int = 0
"""정상 종료 (help/version 출력, 프로젝트 확인 거절 포함)."""

FATAL: int = 2
"""사용법 오류 또는 사전 검증 실패."""

COMMAND_NOT_FOUND: int = 127
"""외부 명령(gcloud/terraform)을 PATH 에서 찾지 못함."""
