"""Pydantic models for Solana JSON-RPC responses used by the indexer."""

from pydantic import BaseModel


class SignatureInfo(BaseModel):
    """Entry from getSignaturesForAddress (newest-first)."""

    signature: str
    slot: int = 0
    block_time: int | None = None  # unix, None if the node has no block time
    err: dict | str | None = None  # non-None means the transaction failed

    model_config = {"frozen": True}


class TransactionLogs(BaseModel):
    """The parts of a getTransaction result the decoder needs."""

    signature: str
    log_lines: list[str] = []
    block_time: int = 0

    model_config = {"frozen": True}


class RawAccount(BaseModel):
    """Account address + raw (base64-decoded) data."""

    pubkey: str
    data: bytes
    lamports: int = 0
    owner: str = ""

    model_config = {"frozen": True}
