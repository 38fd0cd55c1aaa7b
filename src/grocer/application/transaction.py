"""Run a use case inside one committed unit of work.

Handlers that write wrap their body in ``run_in_transaction`` so the
commit boundary is explicit: ``work`` either returns and everything it
wrote is committed, or raises and nothing survives.

Serialization failures, deadlocks and lock timeouts surface as
``TransientPersistenceError`` and are retried a bounded number of times
with a fresh unit of work. Business errors are never retried.
"""

from __future__ import annotations

from typing import Callable, TypeVar

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from grocer.domain.exceptions import TransientPersistenceError
from grocer.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3

logger = structlog.get_logger(__name__)


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "transaction_retry",
        attempt=state.attempt_number,
        error=str(exc),
    )


def run_in_transaction(
    uow_factory: UnitOfWorkFactory,
    work: Callable[[UnitOfWork], T],
    attempts: int = DEFAULT_ATTEMPTS,
) -> T:

    @retry(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=0.05, max=1),
        retry=retry_if_exception_type(TransientPersistenceError),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _attempt() -> T:
        with uow_factory() as uow:
            result = work(uow)
            uow.commit()
            return result

    return _attempt()
