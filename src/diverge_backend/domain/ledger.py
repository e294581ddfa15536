"""Domain models for ledger transactions and contract calls."""

from dataclasses import dataclass, field
from enum import StrEnum


class SubmissionState(StrEnum):
    """Lifecycle of a single ledger submission."""

    BUILDING = "BUILDING"
    PREPARING = "PREPARING"
    SIGNING = "SIGNING"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"


class SendStatus(StrEnum):
    """Immediate status returned when a signed payload is sent."""

    PENDING = "PENDING"
    DUPLICATE = "DUPLICATE"
    TRY_AGAIN_LATER = "TRY_AGAIN_LATER"
    ERROR = "ERROR"


class FinalityStatus(StrEnum):
    """Status reported when querying a transaction by hash."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    NOT_FOUND = "NOT_FOUND"


TERMINAL_STATUSES = frozenset({FinalityStatus.SUCCESS, FinalityStatus.FAILED})


class ArgKind(StrEnum):
    """Ledger value kinds used as contract arguments."""

    ADDRESS = "address"
    BYTES = "bytes"
    SYMBOL = "symbol"
    U32 = "u32"
    BOOL = "bool"


@dataclass(frozen=True)
class ContractArg:
    """A typed positional contract argument."""

    kind: ArgKind
    value: str | int | bool

    @classmethod
    def address(cls, value: str) -> "ContractArg":
        return cls(ArgKind.ADDRESS, value)

    @classmethod
    def bytes_hex(cls, value: str) -> "ContractArg":
        return cls(ArgKind.BYTES, value)

    @classmethod
    def symbol(cls, value: str) -> "ContractArg":
        return cls(ArgKind.SYMBOL, value)

    @classmethod
    def u32(cls, value: int) -> "ContractArg":
        return cls(ArgKind.U32, value)

    @classmethod
    def boolean(cls, value: bool) -> "ContractArg":  # noqa: FBT001
        return cls(ArgKind.BOOL, value)


@dataclass(frozen=True)
class ContractCall:
    """An invocation of a deployed contract function."""

    contract_id: str
    function: str
    args: tuple[ContractArg, ...]


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a dry-run of a contract call."""

    error: str | None = None
    return_value: str | None = None


@dataclass(frozen=True)
class SendResult:
    """Immediate response to sending a signed transaction."""

    status: SendStatus
    transaction_hash: str
    error_result_xdr: str | None = None


@dataclass(frozen=True)
class TransactionStatus:
    """Finality status of a submitted transaction.

    The return value may be present in any of three shapes depending on the
    RPC server version: a typed ``return_value`` (base64 SCVal), the
    ``result_meta_xdr`` transaction metadata, or a generic ``result`` field.
    """

    status: FinalityStatus
    transaction_hash: str
    return_value: str | None = None
    result_meta_xdr: str | None = None
    result_xdr: str | None = None
    result: object | None = None


@dataclass(frozen=True)
class SubmissionReceipt:
    """Result of driving a contract call to finality."""

    transaction_hash: str
    state: SubmissionState
    final_status: TransactionStatus
    attempts: int
    transitions: list[SubmissionState] = field(default_factory=list)
