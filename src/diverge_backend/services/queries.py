"""Monthly session counts and center statistics."""

import logging
from dataclasses import dataclass

from diverge_backend.domain.encoding import encode_text
from diverge_backend.domain.errors import ConfigurationError, LedgerGatewayError
from diverge_backend.domain.ledger import ContractArg, ContractCall
from diverge_backend.domain.sessions import (
    AttendanceStatus,
    Beneficiary,
    MonthPeriod,
    SessionCacheRow,
    TherapyType,
)
from diverge_backend.domain.stats import MonthlyCount, MonthlyStats
from diverge_backend.services.results import decode_u32
from diverge_backend.services.sessions import SessionCacheRepository
from diverge_backend.services.submissions import LedgerGateway

logger = logging.getLogger(__name__)

MONTHLY_COUNT_FUNCTION = "get_monthly_count"


def build_monthly_count_call(
    contract_id: str, beneficiary: Beneficiary, yyyymm: int, therapy_type: TherapyType
) -> ContractCall:
    """Build the read-only get_monthly_count call for one therapy kind."""
    return ContractCall(
        contract_id=contract_id,
        function=MONTHLY_COUNT_FUNCTION,
        args=(
            ContractArg.bytes_hex(encode_text(beneficiary.name)),
            ContractArg.bytes_hex(encode_text(beneficiary.pin)),
            ContractArg.u32(yyyymm),
            ContractArg.symbol(therapy_type.value),
        ),
    )


@dataclass
class SessionQueryService:
    """Reads ledger counts and cached session details."""

    gateway: LedgerGateway
    repository: SessionCacheRepository
    contract_id: str | None
    reader_secret: str | None

    async def monthly_count(
        self, beneficiary: Beneficiary, period: MonthPeriod
    ) -> MonthlyCount:
        """Return per-kind ledger counts plus cached details for a month.

        The contract only counts one therapy kind per call, so each kind is
        read separately. A failed read counts as zero for that kind only.
        """
        if not self.contract_id:
            raise ConfigurationError("CONTRACT_ID is not configured")
        source_address = self._reader_address()
        breakdown: dict[str, int] = {}
        for therapy_type in TherapyType:
            call = build_monthly_count_call(
                self.contract_id, beneficiary, period.yyyymm, therapy_type
            )
            try:
                breakdown[therapy_type.value] = await self._read_u32(
                    source_address, call
                )
            except Exception:
                logger.exception(
                    "Monthly count read failed",
                    extra={"therapy_type": therapy_type.value, "yyyymm": period.yyyymm},
                )
                breakdown[therapy_type.value] = 0
        return MonthlyCount(
            breakdown=breakdown,
            sessions=self._beneficiary_sessions(beneficiary, period),
        )

    def monthly_stats(self, period: MonthPeriod) -> MonthlyStats:
        """Return cache-side center statistics; all zeros if the cache fails."""
        yyyymm = period.yyyymm
        try:
            by_status = {
                status.value: self.repository.count_by_status(yyyymm, status.value)
                for status in AttendanceStatus
            }
            by_type = {
                kind.value: self.repository.count_by_therapy_type(yyyymm, kind.value)
                for kind in TherapyType
            }
        except Exception:
            logger.exception("Monthly stats query failed", extra={"yyyymm": yyyymm})
            by_status = {status.value: 0 for status in AttendanceStatus}
            by_type = {kind.value: 0 for kind in TherapyType}
        return MonthlyStats(
            completadas=by_status[AttendanceStatus.COMPLETADA],
            no_asistio=by_status[AttendanceStatus.NO_ASISTIO],
            canceladas=by_status[AttendanceStatus.CANCELADA],
            breakdown_by_type=by_type,
        )

    def _reader_address(self) -> str:
        if not self.reader_secret:
            raise ConfigurationError(
                "No ledger account available for queries: THERAPIST_SECRET is not set"
            )
        try:
            return self.gateway.public_key(self.reader_secret)
        except LedgerGatewayError as exc:
            raise ConfigurationError(f"Invalid signing credential: {exc}") from exc

    async def _read_u32(self, source_address: str, call: ContractCall) -> int:
        transaction = await self.gateway.build_transaction(source_address, call)
        simulation = await self.gateway.simulate(transaction)
        if simulation.error:
            raise LedgerGatewayError(simulation.error)
        if simulation.return_value is None:
            return 0
        return decode_u32(simulation.return_value) or 0

    def _beneficiary_sessions(
        self, beneficiary: Beneficiary, period: MonthPeriod
    ) -> list[SessionCacheRow]:
        try:
            return self.repository.list_beneficiary_sessions(
                beneficiary.name, beneficiary.pin, period.yyyymm
            )
        except Exception:
            logger.exception(
                "Cached session lookup failed", extra={"yyyymm": period.yyyymm}
            )
            return []
