"""
retry_utils
-----------

불안정한 외부 호출(gcloud 인증, 버킷 생성 등)을 고정 간격으로 재시도하는 헬퍼.
"""

from __future__ import annotations

from typing import Any, Callable

from tenacity import RetryError, Retrying, retry_if_exception_type, retry_if_result, stop_after_attempt, wait_fixed

from .logging_utils import get_logger


logger = get_logger(__name__)

RETRY_DELAY_SECONDS: float = 2.0


def _log_attempt(retry_state) -> None:  # noqa: ANN001
    name = getattr(retry_state.fn, "__name__", repr(retry_state.fn))
    logger.warning(
        "%s 실패 (시도 %d), %.1f초 후 재시도합니다.",
        name,
        retry_state.attempt_number,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


def retry(
    max_attempts: int,
    fn: Callable[..., Any],
    *args: Any,
    delay: float | None = None,
    **kwargs: Any,
) -> bool:
    """
    fn 을 최대 max_attempts 번 실행한다.

    fn 이 truthy 값을 돌려주면 즉시 True 를 반환하고,
    falsy 값을 돌려주거나 예외를 던지면 delay 초 쉰 뒤 다시 시도한다.
    모든 시도가 실패한 경우에만 False 를 반환한다.
    """
    wait = RETRY_DELAY_SECONDS if delay is None else delay
    retrying = Retrying(
        stop=stop_after_attempt(max(int(max_attempts), 1)),
        wait=wait_fixed(wait),
        retry=retry_if_result(lambda ok: not ok) | retry_if_exception_type(Exception),
        before_sleep=_log_attempt,
    )
    try:
        return bool(retrying(fn, *args, **kwargs))
    except RetryError as e:
        last = e.last_attempt
        if last.failed:
            logger.debug("마지막 시도 예외: %s", last.exception())
        return False
