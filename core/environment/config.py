import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationException


class SecretChannel(str, Enum):
    """
    Input channels a secret can be read from.

    Attributes
    ----------
    APP : str
        Operator secret baked into the task definition
    REQUESTER : str
        Caller secrets provided at invocation time
    PROTECTED : str
        Encrypted protected data archive
    """
    APP = "app"
    REQUESTER = "requester"
    PROTECTED = "protected"


class SecretSource(BaseModel):
    """
    Location of one logical input.

    Attributes
    ----------
    channel : SecretChannel
        Channel holding the value
    key : str | None
        JSON field of the app secret, requester secret index or
        protected data field name
    """
    channel: SecretChannel
    key: str | None = None

    @classmethod
    def parse(cls, value: str) -> "SecretSource":
        """
        Parse a ``channel[:key]`` source definition.

        Parameters
        ----------
        value : str
            Source definition, e.g. ``requester:1`` or ``app:targetAddress``

        Returns
        -------
        SecretSource
            Parsed source

        Raises
        ------
        ValueError
            If the channel is unknown or the key does not fit the channel
        """
        channel_name, _, key = value.strip().partition(":")
        try:
            channel = SecretChannel(channel_name.lower())
        except ValueError:
            raise ValueError(f"Unknown secret channel: {channel_name}") from None

        key = key or None
        if channel is SecretChannel.REQUESTER:
            if key is None or not key.isdigit() or int(key) < 1:
                raise ValueError(f"Requester secret index must be a positive integer: {value}")
        if channel is SecretChannel.PROTECTED and key is None:
            raise ValueError(f"Protected data field is required: {value}")
        return cls(channel=channel, key=key)


class Settings(BaseSettings):
    """
    Task settings using Pydantic Settings.

    Attributes
    ----------
    iexec_out : Path
        Output directory for the banner and the computed descriptor
    iexec_in : Path | None
        Input directory holding the protected data archive
    iexec_dataset_filename : str | None
        Protected data archive file name
    signing_key_source : str
        Channel supplying the lender private key
    target_address_source : str
        Channel supplying the recipient address
    amount_source : str
        Channel supplying the transfer amount
    rpc_url_source : str
        Channel supplying the RPC URL
    beneficiary_address_source : str | None
        Channel supplying the escrow beneficiary (escrow step disabled if unset)
    escrow_contract_address : str | None
        Deployed escrow contract address
    confirmation_timeout : float
        Seconds to wait for the transaction receipt
    confirmation_poll_interval : float
        Seconds between receipt polls
    rpc_request_timeout : float
        HTTP timeout of a single RPC request
    currency_symbol : str
        Native currency label used in logs and messages
    result_filename : str
        Banner file name inside ``iexec_out``
    computed_filename : str
        Descriptor file name inside ``iexec_out``
    """

    iexec_out: Path
    iexec_in: Path | None = None
    iexec_dataset_filename: str | None = None

    signing_key_source: str = "app:lenderAddress"
    target_address_source: str = "app:targetAddress"
    amount_source: str = "requester:1"
    rpc_url_source: str = "requester:2"
    beneficiary_address_source: str | None = None

    escrow_contract_address: str | None = None

    confirmation_timeout: float = 300.0
    confirmation_poll_interval: float = 1.0
    rpc_request_timeout: float = 30.0

    currency_symbol: str = "ETH"
    result_filename: str = "result.txt"
    computed_filename: str = "computed.json"

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator(
        "signing_key_source",
        "target_address_source",
        "amount_source",
        "rpc_url_source",
        "beneficiary_address_source"
    )
    @classmethod
    def strip_source(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    def get_source(self, field: str) -> SecretSource | None:
        """
        Get the channel configured for a logical field.

        Parameters
        ----------
        field : str
            Field name (signing_key, target_address, amount, rpc_url,
            beneficiary_address)

        Returns
        -------
        SecretSource | None
            Configured source, None if the field is not configured

        Raises
        ------
        ConfigurationException
            If the configured source cannot be parsed
        """
        value = getattr(self, f"{field}_source")
        if not value:
            return None
        try:
            return SecretSource.parse(value)
        except ValueError as e:
            raise ConfigurationException(f"Invalid {field.upper()}_SOURCE: {e}") from None

    @property
    def result_path(self) -> Path:
        return self.iexec_out / self.result_filename

    @property
    def computed_path(self) -> Path:
        return self.iexec_out / self.computed_filename

    @property
    def protected_data_path(self) -> Path | None:
        if self.iexec_in is None or not self.iexec_dataset_filename:
            return None
        return self.iexec_in / self.iexec_dataset_filename
