"""Domain models for therapy sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class TherapyType(StrEnum):
    """Therapy kinds accepted by the session contract."""

    KINESIO = "KINESIO"
    FONO = "FONO"
    PSICO = "PSICO"
    OCUPACIONAL = "OCUPACIONAL"


class AttendanceStatus(StrEnum):
    """Attendance outcomes accepted by the session contract."""

    COMPLETADA = "COMPLETADA"
    NO_ASISTIO = "NO_ASISTIO"
    CANCELADA = "CANCELADA"


@dataclass(frozen=True)
class Beneficiary:
    """Normalized beneficiary identity (name + PIN)."""

    name: str
    pin: str


@dataclass(frozen=True)
class SessionSubmission:
    """Validated input for recording one therapy session."""

    beneficiary: Beneficiary
    therapy_type: TherapyType
    status: AttendanceStatus
    duration_minutes: int
    notes: str | None


@dataclass(frozen=True)
class MonthPeriod:
    """A calendar month."""

    month: int
    year: int

    @property
    def yyyymm(self) -> int:
        return self.year * 100 + self.month


@dataclass(frozen=True)
class NewSessionCacheRow:
    """Fields written to the local cache after a successful submission."""

    transaction_hash: str
    session_id: int | None
    therapist_address: str
    beneficiary_name: str
    beneficiary_pin: str
    therapy_type: str
    status: str
    duration_minutes: int | None
    notes: str | None
    yyyymm: int


@dataclass(frozen=True)
class SessionCacheRow:
    """A persisted cache row."""

    id: int
    session_id: int | None
    transaction_hash: str
    therapist_address: str
    beneficiary_name: str
    beneficiary_pin: str
    therapy_type: str
    status: str
    duration_minutes: int | None
    notes: str | None
    yyyymm: int
    created_at: datetime | None
