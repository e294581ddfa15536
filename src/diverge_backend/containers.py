"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diverge_backend.adapters.stellar_gateway import StellarLedgerGateway
from diverge_backend.adapters.supabase_session_cache_repository import (
    SupabaseSessionCacheRepository,
)
from diverge_backend.config import Settings
from diverge_backend.services.polling import RetryPolicy
from diverge_backend.services.queries import SessionQueryService
from diverge_backend.services.sessions import SessionRecordingService
from diverge_backend.services.submissions import LedgerGateway, TransactionSubmitter
from diverge_backend.services.therapists import TherapistAdminService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger_gateway: LedgerGateway
    recording_service: SessionRecordingService
    query_service: SessionQueryService
    therapist_service: TherapistAdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache_repository = SupabaseSessionCacheRepository(supabase_client)
    # The guard middleware rejects traffic until the ledger settings exist.
    gateway = StellarLedgerGateway.create(
        rpc_url=resolved_settings.soroban_rpc_url or "",
        network_passphrase=resolved_settings.network_passphrase or "",
    )
    submitter = TransactionSubmitter(
        gateway=gateway,
        policy=RetryPolicy(
            max_attempts=resolved_settings.poll_max_attempts,
            interval_seconds=resolved_settings.poll_interval_seconds,
        ),
    )
    recording_service = SessionRecordingService(
        submitter=submitter,
        repository=cache_repository,
        contract_id=resolved_settings.contract_id,
        therapist_secret=resolved_settings.therapist_secret,
        timezone_name=resolved_settings.center_timezone,
    )
    query_service = SessionQueryService(
        gateway=gateway,
        repository=cache_repository,
        contract_id=resolved_settings.contract_id,
        reader_secret=resolved_settings.therapist_secret,
    )
    therapist_service = TherapistAdminService(
        submitter=submitter,
        contract_id=resolved_settings.contract_id,
        admin_secret=resolved_settings.admin_secret,
    )

    async def close_resources() -> None:
        gateway.close()

    return AppContainer(
        settings=resolved_settings,
        ledger_gateway=gateway,
        recording_service=recording_service,
        query_service=query_service,
        therapist_service=therapist_service,
        close_resources=close_resources,
    )
