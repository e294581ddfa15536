"""Fixed-interval polling for transaction finality."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from diverge_backend.domain.errors import LedgerGatewayError
from diverge_backend.domain.ledger import (
    TERMINAL_STATUSES,
    FinalityStatus,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with a fixed interval between attempts."""

    max_attempts: int = 15
    interval_seconds: float = 2.0

    def is_terminal(self, status: FinalityStatus) -> bool:
        return status in TERMINAL_STATUSES


@dataclass(frozen=True)
class PollOutcome:
    """Last observed status and how many attempts were spent."""

    last_status: TransactionStatus
    attempts: int


async def poll_until_final(
    transaction_hash: str,
    fetch_status: Callable[[str], Awaitable[TransactionStatus]],
    policy: RetryPolicy,
    sleep: Sleep = asyncio.sleep,
) -> PollOutcome:
    """Poll a transaction until it is terminal or the budget is exhausted.

    Every attempt waits ``policy.interval_seconds`` before querying, so a
    transaction that never finalizes costs exactly
    ``max_attempts * interval_seconds`` of waiting. NOT_FOUND responses and
    gateway errors are treated as "not indexed yet" and polling continues.
    """
    last_status = TransactionStatus(
        status=FinalityStatus.NOT_FOUND, transaction_hash=transaction_hash
    )
    for attempt in range(1, policy.max_attempts + 1):
        await sleep(policy.interval_seconds)
        try:
            last_status = await fetch_status(transaction_hash)
        except LedgerGatewayError:
            logger.warning(
                "Transaction status lookup failed",
                extra={"transaction_hash": transaction_hash, "attempt": attempt},
            )
            continue
        if policy.is_terminal(last_status.status):
            return PollOutcome(last_status=last_status, attempts=attempt)
    return PollOutcome(last_status=last_status, attempts=policy.max_attempts)
