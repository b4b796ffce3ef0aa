from pydantic import BaseModel, ConfigDict, SecretStr


class SecretField(BaseModel):
    """
    Logical input of a transfer and how it is named in messages.

    Attributes
    ----------
    name : str
        Field name on ``TransferRequest``
    label : str
        Human readable name used in error messages
    required : bool
        Whether the run fails when the field is not configured
    """
    name: str
    label: str
    required: bool = True

    @property
    def log_name(self) -> str:
        return self.label.upper()


SECRET_FIELDS: tuple[SecretField, ...] = (
    SecretField(name="target_address", label="Target address"),
    SecretField(name="signing_key", label="Lender private key"),
    SecretField(name="amount", label="Total amount"),
    SecretField(name="rpc_url", label="RPC URL"),
    SecretField(name="beneficiary_address", label="Beneficiary address", required=False),
)


class TransferRequest(BaseModel):
    """
    Inputs of a single transfer run.

    Attributes
    ----------
    signing_key : SecretStr
        Lender private key
    rpc_url : SecretStr
        JSON-RPC endpoint
    target_address : str
        Recipient address
    amount : str
        Amount in whole currency units, e.g. "1.5"
    beneficiary_address : str | None
        Escrow beneficiary, enables the escrow step when set
    """
    signing_key: SecretStr
    rpc_url: SecretStr
    target_address: str
    amount: str
    beneficiary_address: str | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)
