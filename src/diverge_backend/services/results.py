"""Decoding of ledger return values and failure reasons."""

import logging
from collections.abc import Mapping

from stellar_sdk import xdr

from diverge_backend.domain.ledger import SendResult, TransactionStatus

logger = logging.getLogger(__name__)

_CONTRACT_ERRORS = {
    "THERAPIST_NOT_AUTHORIZED": "The therapist is not authorized to record sessions",
    "INVALID_BENEFICIARY": "Invalid beneficiary",
    "INSUFFICIENT_BALANCE": "Insufficient balance to pay for the transaction",
    "SESSION_NOT_FOUND": "Session not found on the ledger",
    "NOT_INIT": "The contract has not been initialized",
}
_GENERIC_KEYS = ("retval", "return_value", "returnValue", "value")


def decode_u32(raw: object) -> int | None:
    """Decode an unsigned integer from a base64 SCVal, an SCVal or an int."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        raw = xdr.SCVal.from_xdr(raw)
    if not isinstance(raw, xdr.SCVal):
        return None
    if raw.type == xdr.SCValType.SCV_U32:
        return raw.u32.uint32
    if raw.type == xdr.SCValType.SCV_U64:
        return raw.u64.uint64
    return None


def extract_session_id(status: TransactionStatus) -> int | None:
    """Return the numeric session id carried by a successful transaction.

    Tries the typed return value, then the transaction metadata, then the
    generic result field. Returns None when none of them decode.
    """
    decoders = (
        ("return_value", status.return_value, decode_u32),
        ("result_meta_xdr", status.result_meta_xdr, _decode_meta),
        ("result", status.result, _decode_generic),
    )
    for source, raw, decoder in decoders:
        if raw is None:
            continue
        try:
            value = decoder(raw)
        except Exception:
            logger.debug(
                "Could not decode session id",
                extra={"source": source, "transaction_hash": status.transaction_hash},
            )
            continue
        if value is not None:
            return value
    return None


def describe_ledger_error(message: str | None) -> str:
    """Return a human-readable reason for a ledger failure message."""
    text = message or ""
    for code, description in _CONTRACT_ERRORS.items():
        if code in text:
            return description
    lowered = text.lower()
    if "simulation" in lowered:
        return "Transaction simulation failed. Check the call parameters."
    if "contract" in lowered:
        return "Contract call failed. Check that the contract is deployed."
    return text or "Unknown ledger error"


def describe_transaction_result(result_xdr: str | None) -> str | None:
    """Return the result code name of a base64 TransactionResult, if decodable."""
    if not result_xdr:
        return None
    try:
        result = xdr.TransactionResult.from_xdr(result_xdr)
    except Exception:
        logger.debug("Could not decode transaction result")
        return None
    return result.result.code.name


def describe_send_rejection(sent: SendResult) -> str:
    reason = describe_transaction_result(sent.error_result_xdr)
    if reason:
        return f"Ledger rejected the transaction ({sent.status}): {reason}"
    return f"Ledger rejected the transaction ({sent.status})"


def _decode_meta(raw: object) -> int | None:
    if not isinstance(raw, str):
        return None
    meta = xdr.TransactionMeta.from_xdr(raw)
    for version in ("v4", "v3"):
        body = getattr(meta, version, None)
        soroban_meta = getattr(body, "soroban_meta", None) if body else None
        if soroban_meta is not None and soroban_meta.return_value is not None:
            return decode_u32(soroban_meta.return_value)
    return None


def _decode_generic(raw: object) -> int | None:
    if isinstance(raw, Mapping):
        for key in _GENERIC_KEYS:
            if raw.get(key) is not None:
                return decode_u32(raw[key])
        return None
    return decode_u32(raw)
