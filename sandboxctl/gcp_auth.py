"""
gcp_auth
--------

gcloud 로그인 상태를 확인하고, 클라이언트 라이브러리에서 사용할
OAuth2 자격 증명을 만드는 모듈.

Cloud Storage / Pub/Sub 클라이언트는 ADC 대신 gcloud 사용자 토큰을 그대로 사용한다.
"""

from __future__ import annotations

import threading
from typing import Optional

from google.oauth2.credentials import Credentials

from .logging_utils import get_logger
from .subprocess_utils import run_command


logger = get_logger(__name__)

# 한 번의 실행(프로세스) 동안 GCS / Pub/Sub 클라이언트가 공유하는 자격 증명
_credentials_lock = threading.Lock()
_cached_credentials: Optional[Credentials] = None


def auth_token(verbose: bool = False) -> Optional[str]:
    """
    `gcloud auth print-access-token` 결과를 반환한다. 로그인되어 있지 않으면 None.
    """
    result = run_command(["gcloud", "auth", "print-access-token", "--quiet"], verbose=verbose)
    token = result.stdout.strip()
    if not result.ok or not token:
        logger.debug("gcloud 액세스 토큰을 얻지 못했습니다 (exit=%s)", result.returncode)
        return None
    return token


def credentials(verbose: bool = False) -> Optional[Credentials]:
    """
    gcloud 토큰으로 만든 자격 증명을 반환한다.
    처음 성공한 결과를 캐시하여 gcloud 를 반복 호출하지 않는다.
    """
    global _cached_credentials
    with _credentials_lock:
        if _cached_credentials is None:
            token = auth_token(verbose=verbose)
            if token is None:
                return None
            _cached_credentials = Credentials(token=token)
        return _cached_credentials


def reset_credentials() -> None:
    global _cached_credentials
    with _credentials_lock:
        _cached_credentials = None
