from __future__ import annotations

import subprocess
from dataclasses import dataclass
from textwrap import shorten
from typing import Mapping, Sequence

from . import exit_codes
from .logging_utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    cmd: Sequence[str],
    *,
    verbose: bool = False,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    stream_output: bool = False,
) -> RunResult:
    """
    외부 명령(gcloud/terraform) 실행 공통 유틸.

    실패해도 예외를 던지지 않고 종료 코드를 RunResult 로 돌려준다.

    - verbose=False: stderr 를 캡처하여 터미널에 보이지 않게 한다.
    - verbose=True : 실행 전/후로 명령과 종료 코드를 로그로 남기고 stderr 를 그대로 흘린다.
    - stream_output=True : stdout 을 캡처하지 않고 터미널로 바로 출력한다 (terraform apply 등).
    """
    if verbose:
        logger.info("명령 실행: %s", " ".join(cmd))

    stdout_target = None if stream_output else subprocess.PIPE
    stderr_target = None if verbose else subprocess.PIPE

    try:
        proc = subprocess.run(  # noqa: S603
            list(cmd),
            stdout=stdout_target,
            stderr=stderr_target,
            text=True,
            timeout=timeout,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError:
        logger.error(
            "필요한 명령을 찾을 수 없습니다: %s (gcloud/terraform 이 설치되어 있는지 확인하세요)",
            cmd[0],
        )
        return RunResult(returncode=exit_codes.COMMAND_NOT_FOUND, stdout="", stderr="")
    except subprocess.TimeoutExpired:
        logger.error("명령 실행이 %s초 안에 끝나지 않았습니다: %s", timeout, " ".join(cmd))
        return RunResult(returncode=1, stdout="", stderr="")

    stdout = proc.stdout or ""
    stderr = proc.stderr or ""

    if verbose:
        logger.info("명령 종료: %s (exit=%s)", " ".join(cmd), proc.returncode)
    if stdout:
        logger.debug("명령 stdout: %s", shorten(stdout.strip(), width=2000))
    if stderr:
        logger.debug("명령 stderr: %s", shorten(stderr.strip(), width=2000))

    return RunResult(returncode=proc.returncode, stdout=stdout, stderr=stderr)
