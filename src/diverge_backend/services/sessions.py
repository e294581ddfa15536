"""Recording of therapy sessions on the ledger with a local cache mirror."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from diverge_backend.domain.encoding import encode_text
from diverge_backend.domain.errors import ConfigurationError
from diverge_backend.domain.ledger import ContractArg, ContractCall
from diverge_backend.domain.sessions import (
    MonthPeriod,
    NewSessionCacheRow,
    SessionCacheRow,
    SessionSubmission,
)
from diverge_backend.services.results import extract_session_id
from diverge_backend.services.submissions import TransactionSubmitter

logger = logging.getLogger(__name__)

RECORD_SESSION_FUNCTION = "record_session"


class SessionCacheRepository(Protocol):
    """Persistence interface for the local session cache."""

    def insert_session(self, row: NewSessionCacheRow) -> SessionCacheRow:
        """Insert a row; reject a second row with the same transaction hash."""

    def list_beneficiary_sessions(
        self, beneficiary_name: str, beneficiary_pin: str, yyyymm: int
    ) -> list[SessionCacheRow]:
        """Return cached sessions for a beneficiary in a month, newest first."""

    def count_by_status(self, yyyymm: int, status: str) -> int:
        """Return the number of sessions in a month with an attendance status."""

    def count_by_therapy_type(self, yyyymm: int, therapy_type: str) -> int:
        """Return the number of sessions in a month with a therapy kind."""


@dataclass(frozen=True)
class RecordedSession:
    """Outcome of a successfully recorded session."""

    transaction_hash: str
    session_id: int | None
    yyyymm: int
    cache_row: SessionCacheRow | None


def build_record_call(
    contract_id: str,
    therapist_address: str,
    submission: SessionSubmission,
    yyyymm: int,
) -> ContractCall:
    """Build the record_session call in the contract's positional order."""
    return ContractCall(
        contract_id=contract_id,
        function=RECORD_SESSION_FUNCTION,
        args=(
            ContractArg.address(therapist_address),
            ContractArg.bytes_hex(encode_text(submission.beneficiary.name)),
            ContractArg.bytes_hex(encode_text(submission.beneficiary.pin)),
            ContractArg.symbol(submission.therapy_type.value),
            ContractArg.symbol(submission.status.value),
            ContractArg.u32(yyyymm),
        ),
    )


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionRecordingService:
    """Records one beneficiary session through to ledger finality."""

    submitter: TransactionSubmitter
    repository: SessionCacheRepository
    contract_id: str | None
    therapist_secret: str | None
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = _utc_now

    def current_period(self) -> MonthPeriod:
        now = self.clock().astimezone(ZoneInfo(self.timezone_name))
        return MonthPeriod(month=now.month, year=now.year)

    async def record_session(self, submission: SessionSubmission) -> RecordedSession:
        """Submit a session to the ledger and mirror it into the cache."""
        secret = self.therapist_secret
        if not secret:
            raise ConfigurationError("Missing signer: THERAPIST_SECRET is not configured")
        if not self.contract_id:
            raise ConfigurationError("CONTRACT_ID is not configured")
        therapist_address = self.submitter.signer_address(secret)
        yyyymm = self.current_period().yyyymm
        call = build_record_call(
            self.contract_id, therapist_address, submission, yyyymm
        )
        receipt = await self.submitter.submit(call, secret, therapist_address)

        session_id = extract_session_id(receipt.final_status)
        if session_id is None:
            logger.info(
                "Session id not available in ledger result",
                extra={"transaction_hash": receipt.transaction_hash},
            )
        cache_row = self._write_through(
            NewSessionCacheRow(
                transaction_hash=receipt.transaction_hash,
                session_id=session_id,
                therapist_address=therapist_address,
                beneficiary_name=submission.beneficiary.name,
                beneficiary_pin=submission.beneficiary.pin,
                therapy_type=submission.therapy_type.value,
                status=submission.status.value,
                duration_minutes=submission.duration_minutes,
                notes=submission.notes,
                yyyymm=yyyymm,
            )
        )
        return RecordedSession(
            transaction_hash=receipt.transaction_hash,
            session_id=session_id,
            yyyymm=yyyymm,
            cache_row=cache_row,
        )

    def _write_through(self, row: NewSessionCacheRow) -> SessionCacheRow | None:
        # The ledger write already succeeded; cache failures never fail the request.
        try:
            return self.repository.insert_session(row)
        except Exception:
            logger.exception(
                "Failed to cache recorded session",
                extra={"transaction_hash": row.transaction_hash},
            )
            return None
