"""Center-wide statistics endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from diverge_backend.api.models import MonthlyStatsRequest
from diverge_backend.services.validation import validate_period

if TYPE_CHECKING:
    from diverge_backend.containers import AppContainer

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.post("/monthly")
async def monthly_stats(body: MonthlyStatsRequest, request: Request) -> dict:
    """Return session counts by status and therapy kind for a month."""
    container: AppContainer = request.app.state.container
    period = validate_period(body.mes, body.anio)
    stats = container.query_service.monthly_stats(period)
    return {
        "success": True,
        "completadas": stats.completadas,
        "no_asistio": stats.no_asistio,
        "canceladas": stats.canceladas,
        "total": stats.total,
        "breakdown_by_type": stats.breakdown_by_type,
        "month": period.month,
        "year": period.year,
        "yyyymm": period.yyyymm,
    }
