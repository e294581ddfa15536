"""Supabase-backed local cache of recorded sessions."""

from dataclasses import asdict, dataclass
from datetime import datetime

from postgrest.exceptions import APIError
from supabase import Client

from diverge_backend.domain.errors import CacheWriteError, DuplicateTransactionError
from diverge_backend.domain.sessions import NewSessionCacheRow, SessionCacheRow
from diverge_backend.services.sessions import SessionCacheRepository

_TABLE = "sessions"
_UNIQUE_VIOLATION = "23505"
_COLUMNS = (
    "id, session_id, transaction_hash, therapist_address, beneficiary_name, "
    "beneficiary_pin, therapy_type, status, duration_minutes, notes, yyyymm, "
    "created_at"
)


@dataclass
class SupabaseSessionCacheRepository(SessionCacheRepository):
    """Supabase implementation of the session cache."""

    client: Client

    def insert_session(self, row: NewSessionCacheRow) -> SessionCacheRow:
        """Insert a cache row keyed by its transaction hash."""
        try:
            response = self.client.table(_TABLE).insert(asdict(row)).execute()
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise DuplicateTransactionError(row.transaction_hash) from exc
            raise CacheWriteError(f"Failed to cache session: {exc.message}") from exc
        if not response.data:
            raise CacheWriteError("Failed to cache session")
        return _parse_row(response.data[0])

    def list_beneficiary_sessions(
        self, beneficiary_name: str, beneficiary_pin: str, yyyymm: int
    ) -> list[SessionCacheRow]:
        """Return a beneficiary's cached sessions for a month, newest first."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("beneficiary_name", beneficiary_name)
            .eq("beneficiary_pin", beneficiary_pin)
            .eq("yyyymm", yyyymm)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def count_by_status(self, yyyymm: int, status: str) -> int:
        """Return how many cached sessions in a month have an attendance status."""
        return self._count_month(yyyymm, "status", status)

    def count_by_therapy_type(self, yyyymm: int, therapy_type: str) -> int:
        """Return how many cached sessions in a month have a therapy kind."""
        return self._count_month(yyyymm, "therapy_type", therapy_type)

    def _count_month(self, yyyymm: int, column: str, value: str) -> int:
        # Counted server-side; row payloads are capped by the API max_rows.
        response = (
            self.client.table(_TABLE)
            .select("id", count="exact")
            .eq("yyyymm", yyyymm)
            .eq(column, value)
            .limit(1)
            .execute()
        )
        return response.count or 0


def _parse_row(row: dict[str, object]) -> SessionCacheRow:
    created_at_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_at_raw)
        if isinstance(created_at_raw, str) and created_at_raw
        else None
    )
    session_id = row.get("session_id")
    duration = row.get("duration_minutes")
    notes = row.get("notes")
    return SessionCacheRow(
        id=int(row["id"]),
        session_id=int(session_id) if session_id is not None else None,
        transaction_hash=str(row["transaction_hash"]),
        therapist_address=str(row.get("therapist_address", "")),
        beneficiary_name=str(row.get("beneficiary_name", "")),
        beneficiary_pin=str(row.get("beneficiary_pin", "")),
        therapy_type=str(row.get("therapy_type", "")),
        status=str(row.get("status", "")),
        duration_minutes=int(duration) if duration is not None else None,
        notes=str(notes) if notes is not None else None,
        yyyymm=int(row.get("yyyymm", 0)),
        created_at=created_at,
    )
