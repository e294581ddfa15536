"""Admin-signed therapist authorization."""

from dataclasses import dataclass

from diverge_backend.domain.errors import ConfigurationError
from diverge_backend.domain.ledger import ContractArg, ContractCall, SubmissionReceipt
from diverge_backend.services.submissions import TransactionSubmitter

SET_THERAPIST_FUNCTION = "set_therapist"


@dataclass
class TherapistAdminService:
    """Grants or revokes a therapist's permission to record sessions."""

    submitter: TransactionSubmitter
    contract_id: str | None
    admin_secret: str | None

    async def set_therapist(
        self, therapist_address: str, active: bool  # noqa: FBT001
    ) -> SubmissionReceipt:
        """Submit set_therapist signed by the admin credential."""
        secret = self.admin_secret
        if not secret:
            raise ConfigurationError("Missing signer: ADMIN_SECRET is not configured")
        if not self.contract_id:
            raise ConfigurationError("CONTRACT_ID is not configured")
        admin_address = self.submitter.signer_address(secret)
        call = ContractCall(
            contract_id=self.contract_id,
            function=SET_THERAPIST_FUNCTION,
            args=(ContractArg.address(therapist_address), ContractArg.boolean(active)),
        )
        return await self.submitter.submit(call, secret, admin_address)
