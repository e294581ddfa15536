"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from diverge_backend.api.models import SetTherapistRequest
from diverge_backend.config import explorer_network
from diverge_backend.domain.encoding import explorer_url
from diverge_backend.services.validation import validate_address, validate_flag

if TYPE_CHECKING:
    from diverge_backend.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/therapists", dependencies=[Depends(require_admin)])
async def set_therapist(body: SetTherapistRequest, request: Request) -> dict:
    """Authorize or revoke a therapist on the contract."""
    container: AppContainer = request.app.state.container
    therapist_address = validate_address(body.therapist_address)
    active = validate_flag(body.active)
    receipt = await container.therapist_service.set_therapist(
        therapist_address, active
    )
    network = explorer_network(container.settings.network_passphrase)
    return {
        "success": True,
        "therapist_address": therapist_address,
        "active": active,
        "transaction_hash": receipt.transaction_hash,
        "explorer_url": explorer_url(network, receipt.transaction_hash),
    }
