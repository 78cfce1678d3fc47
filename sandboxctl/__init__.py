"""
sandboxctl
----------

Cloud Ops Sandbox 배포용 CLI 패키지.
gcloud / Terraform 을 순서대로 호출하여 데모 GKE 애플리케이션을
GCP 프로젝트에 생성(create)하거나 삭제(delete)하는 것을 목표로 한다.
"""

__version__ = "0.10.0"

__all__ = [
    "config",
    "orchestrator",
]
