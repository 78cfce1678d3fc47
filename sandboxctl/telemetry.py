"""
telemetry
---------

익명 사용 통계 이벤트를 Pub/Sub 토픽으로 전송한다.

프로젝트 ID 는 sha256 해시로만 전송하며, 전송 실패는 절대 실행 결과에 영향을 주지 않는다.
SANDBOX_SKIP_TELEMETRY=true 로 끌 수 있다.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict

from google.cloud import pubsub_v1

from . import __version__, gcp_auth
from .config import RunConfig
from .logging_utils import get_logger


logger = get_logger(__name__)

TELEMETRY_PROJECT = "stackdriver-sandbox-230822"
TELEMETRY_TOPIC = "telemetry_prod"
# 전송 확인을 기다리는 최대 시간. 초과하면 실패로 보고 종료를 지연시키지 않는다.
PUBLISH_TIMEOUT_SECONDS = 2.0


def hash_project_id(project_id: str) -> str:
    return hashlib.sha256(project_id.encode("utf-8")).hexdigest()


def build_event(cfg: RunConfig, event: str) -> Dict[str, Any]:
    return {
        "session": cfg.session_id,
        "project": hash_project_id(cfg.project_id or ""),
        "event": event,
        "datetime": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


def _publisher() -> pubsub_v1.PublisherClient:
    creds = gcp_auth.credentials()
    if creds is None:
        return pubsub_v1.PublisherClient()
    return pubsub_v1.PublisherClient(credentials=creds)


def send_event(cfg: RunConfig, event: str) -> bool:
    """
    이벤트를 전송하고 성공 여부를 반환한다. 어떤 예외도 밖으로 던지지 않는다.
    """
    if cfg.skip_telemetry:
        logger.debug("텔레메트리가 비활성화되어 전송을 건너뜁니다: %s", event)
        return False

    try:
        payload = json.dumps(build_event(cfg, event)).encode("utf-8")
        client = _publisher()
        topic = client.topic_path(TELEMETRY_PROJECT, TELEMETRY_TOPIC)
        client.publish(topic, payload).result(timeout=PUBLISH_TIMEOUT_SECONDS)
    except Exception as e:  # noqa: BLE001
        logger.debug("텔레메트리 전송 실패 (무시): %s", e)
        return False

    logger.debug("텔레메트리 전송 완료: %s", event)
    return True
