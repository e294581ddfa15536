"""Drives contract calls through simulate, sign, submit and finality polling."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from diverge_backend.domain.errors import (
    ConfigurationError,
    LedgerGatewayError,
    SimulationError,
    SubmissionError,
    TransactionFailedError,
    TransactionTimeoutError,
)
from diverge_backend.domain.ledger import (
    ContractCall,
    FinalityStatus,
    SendResult,
    SendStatus,
    SimulationResult,
    SubmissionReceipt,
    SubmissionState,
    TransactionStatus,
)
from diverge_backend.services.polling import RetryPolicy, Sleep, poll_until_final
from diverge_backend.services.results import (
    describe_ledger_error,
    describe_send_rejection,
    describe_transaction_result,
)

logger = logging.getLogger(__name__)

_REJECTED_SEND_STATUSES = {SendStatus.ERROR, SendStatus.TRY_AGAIN_LATER}


class LedgerGateway(Protocol):
    """Interface for ledger RPC primitives."""

    def public_key(self, secret: str) -> str:
        """Return the address controlled by a signing secret."""

    async def build_transaction(self, source_address: str, call: ContractCall) -> object:
        """Load the source account and build an unsigned transaction."""

    async def simulate(self, transaction: object) -> SimulationResult:
        """Dry-run a transaction and return its simulated outcome."""

    async def prepare(self, transaction: object, simulation: SimulationResult) -> object:
        """Attach estimated resources and fees to a simulated transaction."""

    def sign(self, transaction: object, secret: str) -> object:
        """Sign a prepared transaction."""

    async def send(self, transaction: object) -> SendResult:
        """Send a signed transaction to the ledger."""

    async def get_transaction(self, transaction_hash: str) -> TransactionStatus:
        """Return the finality status of a transaction."""


@dataclass
class TransactionSubmitter:
    """Runs one contract call end-to-end for a signing identity.

    Submissions that share a signer are serialized until the ledger accepts
    the signed payload, since each consumes the account sequence number.
    Polling for finality happens outside that lock.
    """

    gateway: LedgerGateway
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Sleep = asyncio.sleep
    _signer_locks: dict[str, asyncio.Lock] = field(
        default_factory=dict, init=False, repr=False
    )

    def signer_address(self, secret: str) -> str:
        """Return the address of a signing secret."""
        try:
            return self.gateway.public_key(secret)
        except LedgerGatewayError as exc:
            raise ConfigurationError(f"Invalid signing credential: {exc}") from exc

    async def submit(
        self, call: ContractCall, secret: str, source_address: str
    ) -> SubmissionReceipt:
        """Build, simulate, prepare, sign, send and poll a contract call."""
        transitions: list[SubmissionState] = []
        async with self._lock_for(source_address):
            sent = await self._send_signed(call, secret, source_address, transitions)

        transaction_hash = sent.transaction_hash
        _enter(transitions, SubmissionState.POLLING, transaction_hash)
        outcome = await poll_until_final(
            transaction_hash, self.gateway.get_transaction, self.policy, self.sleep
        )
        final_status = outcome.last_status
        if final_status.status == FinalityStatus.SUCCESS:
            _enter(transitions, SubmissionState.SUCCEEDED, transaction_hash)
            return SubmissionReceipt(
                transaction_hash=transaction_hash,
                state=SubmissionState.SUCCEEDED,
                final_status=final_status,
                attempts=outcome.attempts,
                transitions=transitions,
            )
        if final_status.status == FinalityStatus.FAILED:
            _enter(transitions, SubmissionState.FAILED, transaction_hash)
            reason = describe_transaction_result(final_status.result_xdr)
            message = "Transaction failed with status FAILED"
            if reason:
                message = f"{message}: {reason}"
            raise TransactionFailedError(message, transaction_hash=transaction_hash)

        _enter(transitions, SubmissionState.TIMED_OUT, transaction_hash)
        raise TransactionTimeoutError(
            (
                f"Transaction {transaction_hash} not confirmed after "
                f"{outcome.attempts} attempts (last status: {final_status.status})"
            ),
            transaction_hash=transaction_hash,
            last_status=str(final_status.status),
        )

    async def _send_signed(
        self,
        call: ContractCall,
        secret: str,
        source_address: str,
        transitions: list[SubmissionState],
    ) -> SendResult:
        _enter(transitions, SubmissionState.BUILDING)
        try:
            transaction = await self.gateway.build_transaction(source_address, call)
        except LedgerGatewayError as exc:
            raise SubmissionError(f"Could not build transaction: {exc}") from exc

        _enter(transitions, SubmissionState.PREPARING)
        simulation = await self._simulate(transaction)
        try:
            transaction = await self.gateway.prepare(transaction, simulation)
        except LedgerGatewayError as exc:
            raise SimulationError(describe_ledger_error(str(exc))) from exc

        _enter(transitions, SubmissionState.SIGNING)
        try:
            transaction = self.gateway.sign(transaction, secret)
            sent = await self.gateway.send(transaction)
        except LedgerGatewayError as exc:
            raise SubmissionError(describe_ledger_error(str(exc))) from exc

        _enter(transitions, SubmissionState.SUBMITTED, sent.transaction_hash)
        if sent.status in _REJECTED_SEND_STATUSES:
            raise SubmissionError(
                describe_send_rejection(sent), transaction_hash=sent.transaction_hash
            )
        return sent

    async def _simulate(self, transaction: object) -> SimulationResult:
        try:
            simulation = await self.gateway.simulate(transaction)
        except LedgerGatewayError as exc:
            raise SimulationError(describe_ledger_error(str(exc))) from exc
        if simulation.error:
            logger.warning("Simulation rejected", extra={"error": simulation.error})
            raise SimulationError(describe_ledger_error(simulation.error))
        return simulation

    def _lock_for(self, address: str) -> asyncio.Lock:
        lock = self._signer_locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._signer_locks[address] = lock
        return lock


def _enter(
    transitions: list[SubmissionState],
    state: SubmissionState,
    transaction_hash: str | None = None,
) -> None:
    transitions.append(state)
    logger.info(
        "Submission state %s",
        state,
        extra={"transaction_hash": transaction_hash},
    )
