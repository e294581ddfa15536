"""Tests for admin endpoints."""

from fastapi.testclient import TestClient

from diverge_backend.api.app import create_app
from diverge_backend.domain.ledger import ArgKind
from tests.conftest import ADMIN_ADDRESS, THERAPIST_ADDRESS


def test_set_therapist_requires_token(container, ledger_gateway) -> None:
    client = TestClient(create_app(container))

    missing = client.post(
        "/admin/therapists", json={"therapist_address": THERAPIST_ADDRESS}
    )
    wrong = client.post(
        "/admin/therapists",
        json={"therapist_address": THERAPIST_ADDRESS},
        headers={"X-Admin-Token": "nope"},
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert ledger_gateway.events == []


def test_set_therapist_submits_admin_signed_call(container, ledger_gateway) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/therapists",
        json={"therapist_address": THERAPIST_ADDRESS, "active": False},
        headers={"X-Admin-Token": "admin-token"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["active"] is False
    assert data["transaction_hash"] == "tx-1"
    call = ledger_gateway.calls[0]
    assert call.function == "set_therapist"
    assert [(arg.kind, arg.value) for arg in call.args] == [
        (ArgKind.ADDRESS, THERAPIST_ADDRESS),
        (ArgKind.BOOL, False),
    ]


def test_set_therapist_builds_from_admin_account(container, ledger_gateway) -> None:
    seen: list[str] = []
    build = ledger_gateway.build_transaction

    async def record_source(source_address, call):  # type: ignore[no-untyped-def]
        seen.append(source_address)
        return await build(source_address, call)

    ledger_gateway.build_transaction = record_source
    client = TestClient(create_app(container))

    client.post(
        "/admin/therapists",
        json={"therapist_address": THERAPIST_ADDRESS},
        headers={"X-Admin-Token": "admin-token"},
    )

    assert seen == [ADMIN_ADDRESS]


def test_set_therapist_validates_address(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/therapists",
        json={"therapist_address": "GBAD"},
        headers={"X-Admin-Token": "admin-token"},
    )

    assert response.status_code == 400
    assert response.json()["field"] == "therapist_address"


def test_set_therapist_without_admin_secret(container) -> None:
    container.therapist_service.admin_secret = None
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/therapists",
        json={"therapist_address": THERAPIST_ADDRESS},
        headers={"X-Admin-Token": "admin-token"},
    )

    assert response.status_code == 500
    assert "ADMIN_SECRET" in response.json()["error"]


def test_set_therapist_rejects_bad_checksum_address(container, ledger_gateway) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/admin/therapists",
        json={"therapist_address": "G" + "A" * 55},
        headers={"X-Admin-Token": "admin-token"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["field"] == "therapist_address"
    assert ledger_gateway.events == []
