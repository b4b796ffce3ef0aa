from pydantic import BaseModel, ConfigDict, Field


class ResultArtifact(BaseModel):
    """
    Structured descriptor written to ``computed.json`` on every run.

    Attributes
    ----------
    deterministic_output_path : str
        Path of the rendered banner
    transaction_hash : str | None
        Hash of the confirmed transfer
    block_number : int | None
        Block the transfer was mined in
    gas_used : str | None
        Gas consumed by the transfer
    error_message : str | None
        Error of a failed run
    escrow_status : str | None
        Escrow bookkeeping status, only when a beneficiary was configured
    escrow_transaction_hash : str | None
        Hash of the confirmed escrow update
    escrow_error_message : str | None
        Error of the failed escrow update
    """
    deterministic_output_path: str = Field(serialization_alias="deterministic-output-path")
    transaction_hash: str | None = Field(default=None, serialization_alias="transaction-hash")
    block_number: int | None = Field(default=None, serialization_alias="block-number")
    gas_used: str | None = Field(default=None, serialization_alias="gas-used")
    error_message: str | None = Field(default=None, serialization_alias="error-message")
    escrow_status: str | None = Field(default=None, serialization_alias="escrow-status")
    escrow_transaction_hash: str | None = Field(
        default=None,
        serialization_alias="escrow-transaction-hash"
    )
    escrow_error_message: str | None = Field(
        default=None,
        serialization_alias="escrow-error-message"
    )

    model_config = ConfigDict(from_attributes=True)

    def to_json(self) -> str:
        """
        Serialize with the descriptor keys, absent values omitted.

        Returns
        -------
        str
            JSON document
        """
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
