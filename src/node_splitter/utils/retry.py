"""Shared retry decorator for host-level split calls.

The splitting core never retries. A host that splits nodes against a live
database may retry a whole per-node split when the store reports a
transient failure such as a detected deadlock. The failed attempt has
already been rolled back, so a retry starts from the original graph.
"""

from __future__ import annotations

import logging

from neo4j.exceptions import TransientError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from node_splitter.exceptions import StoreError

# tenacity's before_sleep_log requires a stdlib logger, NOT structlog.
_tenacity_logger = logging.getLogger("node_splitter.retry")


def _is_transient_store_error(exc: BaseException) -> bool:
    """Check if an exception is a transient store failure.

    Store adapters wrap driver errors in StoreError, so the driver's own
    TransientError is also looked for on ``__cause__``.

    Args:
        exc: The exception to inspect.

    Returns:
        True if retrying the split may succeed.
    """
    if not isinstance(exc, StoreError):
        return False
    return exc.transient or isinstance(exc.__cause__, TransientError)


transient_retry = retry(
    retry=retry_if_exception(_is_transient_store_error),
    stop=stop_after_attempt(3),
    wait=wait_random_exponential(multiplier=1, min=1, max=10),
    before_sleep=before_sleep_log(_tenacity_logger, logging.WARNING),
    reraise=True,
)
"""Retry decorator for one per-node split.

Three attempts with random exponential backoff capped at 10s. The last
StoreError is re-raised unchanged rather than wrapped in RetryError.
"""
