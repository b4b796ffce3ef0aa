from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class NetworkEntity(BaseModel):
    """
    Entity representing the network behind an RPC endpoint.

    Attributes
    ----------
    chain_name : str
        Well-known network name, "unknown" otherwise
    chain_id : int
        Numeric chain id
    """
    chain_name: str
    chain_id: int

    model_config = ConfigDict(from_attributes=True)


class WalletStateEntity(BaseModel):
    """
    Entity representing the signer wallet at validation time.

    Attributes
    ----------
    address : str
        Checksum address derived from the signing key
    balance_wei : int
        The balance in Wei (smallest unit)
    """
    address: str
    balance_wei: int

    model_config = ConfigDict(from_attributes=True)


class PendingTransactionEntity(BaseModel):
    """
    Entity representing a broadcast, not yet mined transaction.

    Attributes
    ----------
    transaction_hash : str
        Transaction hash
    """
    transaction_hash: str

    model_config = ConfigDict(from_attributes=True)


class TransactionReceiptEntity(BaseModel):
    """
    Entity representing a mined transaction receipt.

    Attributes
    ----------
    transaction_hash : str
        Transaction hash
    status : int
        1 on success, 0 when reverted
    block_number : int
        Block number the transaction was mined in
    gas_used : int
        Gas consumed by the transaction
    """
    transaction_hash: str
    status: int
    block_number: int
    gas_used: int

    model_config = ConfigDict(from_attributes=True)


class EscrowNotAttempted(BaseModel):
    status: Literal["not_attempted"] = "not_attempted"


class EscrowConfirmed(BaseModel):
    status: Literal["confirmed"] = "confirmed"
    transaction_hash: str


class EscrowFailed(BaseModel):
    status: Literal["failed"] = "failed"
    message: str


EscrowUpdateOutcome = Annotated[
    Union[EscrowNotAttempted, EscrowConfirmed, EscrowFailed],
    Field(discriminator="status")
]


class TransferSuccess(BaseModel):
    """
    Outcome of a confirmed transfer.

    Attributes
    ----------
    transaction_hash : str
        Hash of the value transfer
    block_number : int
        Block the transfer was mined in
    gas_used : int
        Gas consumed by the transfer
    escrow_update : EscrowUpdateOutcome
        Result of the best-effort escrow bookkeeping
    """
    status: Literal["success"] = "success"
    transaction_hash: str
    block_number: int
    gas_used: int
    escrow_update: EscrowUpdateOutcome = Field(default_factory=EscrowNotAttempted)


class TransferFailure(BaseModel):
    """
    Outcome of a run that stopped on a fatal error.

    Attributes
    ----------
    message : str
        Error message of the failing step
    """
    status: Literal["failure"] = "failure"
    message: str


TransferOutcome = Annotated[
    Union[TransferSuccess, TransferFailure],
    Field(discriminator="status")
]
