"""Application configuration."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

PUBLIC_NETWORK_PASSPHRASE = "Public Global Stellar Network ; September 2015"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    soroban_rpc_url: str | None = None
    network_passphrase: str | None = None
    contract_id: str | None = None
    therapist_secret: str | None = None
    admin_secret: str | None = None
    admin_token: str | None = None
    supabase_url: str
    supabase_service_key: str
    cors_origin: str = "http://localhost:8000"
    port: int = 3000
    center_timezone: str = "UTC"
    poll_max_attempts: int = 15
    poll_interval_seconds: float = 2.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("center_timezone")
    @classmethod
    def check_center_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value


def missing_ledger_settings(settings: Settings) -> list[str]:
    """Return env names of required ledger settings that are not set."""
    required = {
        "SOROBAN_RPC_URL": settings.soroban_rpc_url,
        "NETWORK_PASSPHRASE": settings.network_passphrase,
        "CONTRACT_ID": settings.contract_id,
    }
    return [name for name, value in required.items() if not (value or "").strip()]


def explorer_network(network_passphrase: str | None) -> str:
    """Map a network passphrase to the explorer network segment."""
    if network_passphrase == PUBLIC_NETWORK_PASSPHRASE:
        return "public"
    return "testnet"
