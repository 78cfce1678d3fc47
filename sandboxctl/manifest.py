"""
manifest
--------

kustomization 매니페스트의 선택 컴포넌트(주석 처리된 components 항목)를
실행 설정에 따라 활성화하고, 실행이 끝나면 원본을 복원한다.

    components:
    # - components/without-loadgenerator
    # - github.com/.../kustomize/components/service-mesh-istio?ref=v0.8.0 # x-release-please-version

줄 끝의 주석(버전 갱신 도구 마커 등)은 그대로 유지한다.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence

from .config import RunConfig
from .logging_utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class ManifestRule:
    component: str
    enabled_if: Callable[[RunConfig], bool]

    @property
    def pattern(self) -> "re.Pattern[str]":
        return re.compile(
            r"^(?P<indent>\s*)#\s*(?P<entry>-\s+\S*components/"
            + re.escape(self.component)
            + r"(?:\?ref=\S+)?)(?P<trail>\s+#.*?)?\s*$"
        )


MANIFEST_RULES: List[ManifestRule] = [
    ManifestRule("without-loadgenerator", lambda cfg: cfg.skip_loadgenerator),
    ManifestRule("service-mesh-istio", lambda cfg: not cfg.skip_asm),
]


def apply_rules(text: str, cfg: RunConfig, rules: Sequence[ManifestRule] = MANIFEST_RULES) -> str:
    """
    활성화 조건을 만족하는 rule 의 컴포넌트 줄에서 주석 기호를 제거한다.
    """
    active = [r for r in rules if r.enabled_if(cfg)]
    if not active:
        return text

    out: List[str] = []
    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        for rule in active:
            m = rule.pattern.match(body)
            if m:
                body = m.group("indent") + m.group("entry") + (m.group("trail") or "")
                logger.debug("매니페스트 컴포넌트 활성화: %s", rule.component)
                break
        out.append(body + ending)
    return "".join(out)


@contextmanager
def patched_manifest(cfg: RunConfig, rules: Sequence[ManifestRule] = MANIFEST_RULES) -> Iterator[str]:
    """
    매니페스트를 백업 후 패치하고, with 블록을 벗어나면 (예외 포함) 원본 바이트를 복원한다.
    """
    path = cfg.manifest_path
    with open(path, "rb") as f:
        original = f.read()

    try:
        patched = apply_rules(original.decode("utf-8"), cfg, rules)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(patched)
        yield path
    finally:
        with open(path, "wb") as f:
            f.write(original)
        logger.debug("매니페스트 원본 복원: %s", path)
