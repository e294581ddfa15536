"""Soroban RPC ledger gateway backed by stellar-sdk."""

import asyncio
from dataclasses import dataclass

from stellar_sdk import Keypair, SorobanServer, TransactionBuilder, scval
from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.exceptions import SdkError

from diverge_backend.domain.errors import LedgerGatewayError
from diverge_backend.domain.ledger import (
    ArgKind,
    ContractArg,
    ContractCall,
    FinalityStatus,
    SendResult,
    SendStatus,
    SimulationResult,
    TransactionStatus,
)
from diverge_backend.services.submissions import LedgerGateway

BASE_FEE = 100
TRANSACTION_TIMEOUT_SECONDS = 600


@dataclass(frozen=True)
class PreparedSimulation(SimulationResult):
    """Simulation result that keeps the raw SDK response for preparation."""

    response: object | None = None


@dataclass
class StellarLedgerGateway(LedgerGateway):
    """Ledger gateway over a Soroban RPC server.

    The SDK client is synchronous, so every network call runs in a worker
    thread and SDK exceptions are re-raised as LedgerGatewayError.
    """

    server: SorobanServer
    network_passphrase: str

    @classmethod
    def create(cls, rpc_url: str, network_passphrase: str) -> "StellarLedgerGateway":
        """Create a gateway with its own Soroban RPC client."""
        return cls(server=SorobanServer(rpc_url), network_passphrase=network_passphrase)

    def public_key(self, secret: str) -> str:
        """Return the public address for a secret seed."""
        try:
            return Keypair.from_secret(secret).public_key
        except (SdkError, ValueError) as exc:
            raise LedgerGatewayError("Invalid secret key") from exc

    async def build_transaction(self, source_address: str, call: ContractCall) -> object:
        """Load the source account and build an unsigned invocation."""
        try:
            account = await asyncio.to_thread(self.server.load_account, source_address)
        except SdkError as exc:
            raise LedgerGatewayError(f"Could not load account: {exc}") from exc
        try:
            return (
                TransactionBuilder(
                    source_account=account,
                    network_passphrase=self.network_passphrase,
                    base_fee=BASE_FEE,
                )
                .append_invoke_contract_function_op(
                    contract_id=call.contract_id,
                    function_name=call.function,
                    parameters=[to_sc_val(arg) for arg in call.args],
                )
                .set_timeout(TRANSACTION_TIMEOUT_SECONDS)
                .build()
            )
        except (SdkError, ValueError) as exc:
            raise LedgerGatewayError(f"Invalid contract call arguments: {exc}") from exc

    async def simulate(self, transaction: object) -> SimulationResult:
        """Simulate a transaction and expose its error and return value."""
        try:
            response = await asyncio.to_thread(
                self.server.simulate_transaction, transaction
            )
        except SdkError as exc:
            raise LedgerGatewayError(f"Simulation request failed: {exc}") from exc
        return_value = None
        if response.results:
            return_value = response.results[0].xdr
        return PreparedSimulation(
            error=response.error, return_value=return_value, response=response
        )

    async def prepare(self, transaction: object, simulation: SimulationResult) -> object:
        """Assemble resources and fees from the simulation into the transaction."""
        response = (
            simulation.response if isinstance(simulation, PreparedSimulation) else None
        )
        try:
            return await asyncio.to_thread(
                self.server.prepare_transaction, transaction, response
            )
        except SdkError as exc:
            raise LedgerGatewayError(f"Simulation failed: {exc}") from exc

    def sign(self, transaction: object, secret: str) -> object:
        """Sign a prepared transaction envelope in place and return it."""
        try:
            transaction.sign(Keypair.from_secret(secret))
        except (SdkError, ValueError) as exc:
            raise LedgerGatewayError("Could not sign transaction") from exc
        return transaction

    async def send(self, transaction: object) -> SendResult:
        """Send a signed transaction envelope."""
        try:
            response = await asyncio.to_thread(
                self.server.send_transaction, transaction
            )
        except SdkError as exc:
            raise LedgerGatewayError(f"Send failed: {exc}") from exc
        return SendResult(
            status=SendStatus(_enum_value(response.status)),
            transaction_hash=response.hash,
            error_result_xdr=response.error_result_xdr,
        )

    async def get_transaction(self, transaction_hash: str) -> TransactionStatus:
        """Return the finality status of a transaction hash."""
        try:
            response = await asyncio.to_thread(
                self.server.get_transaction, transaction_hash
            )
        except SdkError as exc:
            raise LedgerGatewayError(f"Status lookup failed: {exc}") from exc
        return TransactionStatus(
            status=FinalityStatus(_enum_value(response.status)),
            transaction_hash=transaction_hash,
            # Only newer RPC responses carry a typed return value.
            return_value=getattr(response, "return_value", None),
            result_meta_xdr=response.result_meta_xdr,
            result_xdr=response.result_xdr,
        )

    def close(self) -> None:
        """Close the underlying RPC client."""
        self.server.close()


def to_sc_val(arg: ContractArg) -> stellar_xdr.SCVal:
    """Convert a typed contract argument into a ledger value."""
    if arg.kind == ArgKind.ADDRESS:
        return scval.to_address(str(arg.value))
    if arg.kind == ArgKind.BYTES:
        return scval.to_bytes(bytes.fromhex(str(arg.value)))
    if arg.kind == ArgKind.SYMBOL:
        return scval.to_symbol(str(arg.value))
    if arg.kind == ArgKind.U32:
        return scval.to_uint32(int(arg.value))
    if arg.kind == ArgKind.BOOL:
        return scval.to_bool(bool(arg.value))
    raise ValueError(f"Unsupported contract argument kind: {arg.kind}")


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value))
