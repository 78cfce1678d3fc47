"""
gcp_gcs
-------

Terraform state 를 보관하는 GCS 버킷/오브젝트 관리를 담당하는 모듈.
"""

from __future__ import annotations

from typing import Optional, Tuple

from google.api_core.exceptions import Conflict, NotFound
from google.cloud import storage

from . import gcp_auth
from .logging_utils import get_logger


logger = get_logger(__name__)


def parse_gs_uri(uri: str) -> Tuple[str, str]:
    """
    gs://bucket/path/to/object 를 (bucket, object) 로 나눈다.
    """
    if not uri.startswith("gs://"):
        raise ValueError(f"gs:// URI 가 아닙니다: {uri}")
    rest = uri[len("gs://"):]
    bucket, _, name = rest.partition("/")
    if not bucket:
        raise ValueError(f"버킷 이름이 없는 URI 입니다: {uri}")
    return bucket, name


def _client(project_id: Optional[str] = None) -> storage.Client:
    creds = gcp_auth.credentials()
    if creds is None:
        # gcloud 토큰이 없으면 ADC 로 fallback
        return storage.Client(project=project_id)
    return storage.Client(project=project_id, credentials=creds)


def bucket_exists(bucket_name: str, project_id: Optional[str] = None) -> bool:
    client = _client(project_id)
    return client.bucket(bucket_name).exists()


def create_bucket(bucket_name: str, project_id: str) -> bool:
    """
    버킷을 생성한다. 이미 존재하면(Conflict) 성공으로 본다.
    """
    client = _client(project_id)
    try:
        client.create_bucket(bucket_name, project=project_id)
    except Conflict:
        logger.info("버킷이 이미 존재합니다: %s", bucket_name)
        return True
    logger.info("state 버킷을 생성했습니다: gs://%s", bucket_name)
    return True


def object_exists(uri: str, project_id: Optional[str] = None) -> bool:
    bucket_name, name = parse_gs_uri(uri)
    client = _client(project_id)
    try:
        return client.bucket(bucket_name).blob(name).exists()
    except NotFound:
        return False


def delete_object(uri: str, project_id: Optional[str] = None) -> bool:
    """
    오브젝트를 삭제한다. 이미 없으면 성공으로 본다.
    """
    bucket_name, name = parse_gs_uri(uri)
    client = _client(project_id)
    try:
        client.bucket(bucket_name).blob(name).delete()
    except NotFound:
        logger.debug("삭제할 오브젝트가 이미 없습니다: %s", uri)
    logger.info("오브젝트를 삭제했습니다: %s", uri)
    return True
