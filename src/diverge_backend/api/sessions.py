"""Session recording and monthly count endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from diverge_backend.api.models import MonthlyCountRequest, RecordSessionRequest
from diverge_backend.config import explorer_network
from diverge_backend.domain.encoding import explorer_url
from diverge_backend.services.validation import (
    validate_beneficiary,
    validate_period,
    validate_submission,
)

if TYPE_CHECKING:
    from diverge_backend.containers import AppContainer
    from diverge_backend.domain.sessions import SessionCacheRow

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("/record")
async def record_session(body: RecordSessionRequest, request: Request) -> dict:
    """Record a therapy session on the ledger."""
    container: AppContainer = request.app.state.container
    submission = validate_submission(
        name=body.beneficiario_nombre,
        pin=body.beneficiario_pin,
        therapy_type=body.tipo_terapia,
        duration_minutes=body.duracion_minutos,
        status=body.asistencia,
        notes=body.notas,
    )
    recorded = await container.recording_service.record_session(submission)
    network = explorer_network(container.settings.network_passphrase)
    return {
        "success": True,
        "transaction_hash": recorded.transaction_hash,
        "session_id": recorded.session_id,
        "explorer_url": explorer_url(network, recorded.transaction_hash),
    }


@router.post("/monthly-count")
async def monthly_count(body: MonthlyCountRequest, request: Request) -> dict:
    """Return a beneficiary's session count for a month, per therapy kind."""
    container: AppContainer = request.app.state.container
    beneficiary = validate_beneficiary(body.beneficiario_nombre, body.beneficiario_pin)
    period = validate_period(body.mes, body.anio)
    result = await container.query_service.monthly_count(beneficiary, period)
    return {
        "success": True,
        "count": result.total,
        "breakdown": result.breakdown,
        "sessions": [serialize_session(row) for row in result.sessions],
        "month": period.month,
        "year": period.year,
        "beneficiary_name": beneficiary.name,
    }


def serialize_session(row: SessionCacheRow) -> dict[str, object]:
    """Return the public JSON shape of a cached session."""
    return {
        "id": row.id,
        "session_id": row.session_id,
        "transaction_hash": row.transaction_hash,
        "therapist_address": row.therapist_address,
        "therapy_type": row.therapy_type,
        "status": row.status,
        "duration_minutes": row.duration_minutes,
        "notes": row.notes,
        "yyyymm": row.yyyymm,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
