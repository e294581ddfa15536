"""Domain models for session statistics."""

from dataclasses import dataclass, field

from diverge_backend.domain.sessions import SessionCacheRow


@dataclass(frozen=True)
class MonthlyCount:
    """Ledger-side session counts for one beneficiary and month."""

    breakdown: dict[str, int]
    sessions: list[SessionCacheRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.breakdown.values())


@dataclass(frozen=True)
class MonthlyStats:
    """Center-wide cache-side statistics for a month."""

    completadas: int
    no_asistio: int
    canceladas: int
    breakdown_by_type: dict[str, int]

    @property
    def total(self) -> int:
        return self.completadas + self.no_asistio + self.canceladas
