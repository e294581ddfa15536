"""Error taxonomy for session recording and queries."""


class DivergeError(Exception):
    """Base error rendered as a JSON failure envelope."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DivergeError):
    """Raised when an inbound field value is missing or invalid."""

    http_status = 400

    def __init__(self, field: str, constraint: str) -> None:
        super().__init__(f"{field} {constraint}")
        self.field = field
        self.constraint = constraint


class ConfigurationError(DivergeError):
    """Raised when a required credential or identifier is not configured."""


class LedgerError(DivergeError):
    """Base error for failures talking to the ledger."""

    def __init__(self, message: str, transaction_hash: str | None = None) -> None:
        super().__init__(message)
        self.transaction_hash = transaction_hash


class SimulationError(LedgerError):
    """The ledger rejected the pre-flight simulation or preparation."""


class SubmissionError(LedgerError):
    """The ledger rejected the signed payload."""


class TransactionFailedError(LedgerError):
    """The transaction reached the terminal FAILED state."""


class TransactionTimeoutError(LedgerError):
    """Finality was not observed within the retry budget."""

    def __init__(self, message: str, transaction_hash: str, last_status: str) -> None:
        super().__init__(message, transaction_hash=transaction_hash)
        self.last_status = last_status


class LedgerGatewayError(Exception):
    """Transport or SDK failure inside the ledger gateway."""


class CacheWriteError(DivergeError):
    """Failed to write a row to the local session cache."""


class DuplicateTransactionError(CacheWriteError):
    """A cache row already exists for the transaction hash."""

    def __init__(self, transaction_hash: str) -> None:
        super().__init__(f"Session already cached for transaction {transaction_hash}")
        self.transaction_hash = transaction_hash
