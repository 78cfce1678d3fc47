import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # google client 라이브러리의 DEBUG 로그는 -v 에서도 너무 많다.
    logging.getLogger("google").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
