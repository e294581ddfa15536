"""Conversions between human input and contract argument formats."""


def encode_text(text: str) -> str:
    """Encode text as the hex form of its UTF-8 bytes."""
    if not isinstance(text, str) or not text:
        raise ValueError("encode_text requires a non-empty string")
    return text.encode("utf-8").hex()


def explorer_url(network: str, transaction_hash: str) -> str:
    """Return the block explorer link for a transaction."""
    return f"https://stellar.expert/explorer/{network}/tx/{transaction_hash}"
