import logging

from core.environment.config import SecretChannel, SecretSource, Settings
from core.exceptions import (
    ConfigurationException,
    MissingSecretException,
    ProtectedDataException,
)
from core.logging.providers import SecretRedactionFilter, mask
from credentials.channels import SecretChannels
from credentials.schemas import SECRET_FIELDS, SecretField, TransferRequest

# masked wherever they show up in log records
REDACTED_FIELDS = frozenset({"signing_key", "rpc_url"})


class SecretResolver:
    """
    Resolver gathering the transfer inputs from their configured channels.

    No network call happens here; a missing input fails the run before any
    chain interaction.

    Parameters
    ----------
    settings : Settings
        Task settings holding the channel of every field
    channels : SecretChannels
        Secret channels of the process
    redaction_filter : SecretRedactionFilter
        Log filter the resolved secrets are registered with
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        settings: Settings,
        channels: SecretChannels,
        redaction_filter: SecretRedactionFilter,
        logger: logging.Logger
    ):
        self.settings = settings
        self.channels = channels
        self.redaction_filter = redaction_filter
        self.logger = logger
        self._app_secret_logged = False

    def resolve(self) -> TransferRequest:
        """
        Resolve and validate presence of every input.

        Returns
        -------
        TransferRequest
            Fully populated request

        Raises
        ------
        MissingSecretException
            If a mandatory field is absent from its channel
        ProtectedDataException
            If a field sourced from protected data cannot be read
        ConfigurationException
            If a mandatory field has no channel configured or a channel
            setting is malformed
        """
        sources = {field.name: self.settings.get_source(field.name) for field in SECRET_FIELDS}
        # protected data first
        ordered = sorted(
            SECRET_FIELDS,
            key=lambda f: sources[f.name] is None or sources[f.name].channel is not SecretChannel.PROTECTED
        )

        values: dict[str, str] = {}
        for field in ordered:
            source = sources[field.name]
            if source is None:
                if field.required:
                    raise ConfigurationException(f"{field.label} source is not configured")
                continue
            values[field.name] = self._read(field, source)

        return TransferRequest(**values)

    def _read(self, field: SecretField, source: SecretSource) -> str:
        if source.channel is SecretChannel.PROTECTED:
            value = self._read_protected(field, source.key)
        elif source.channel is SecretChannel.APP:
            value = self._read_app(field, source.key)
        else:
            value = self._read_requester(field, int(source.key))

        value = value.strip()
        if field.name in REDACTED_FIELDS:
            self.redaction_filter.register(value)
        return value

    def _read_protected(self, field: SecretField, key: str) -> str:
        error = ProtectedDataException(f"Failed to get {field.label.lower()} from protected data")
        try:
            value = self.channels.protected_field(key)
        except Exception:
            raise error from None
        if not value or not value.strip():
            raise error

        self.logger.info(f"Got protected data {field.log_name} ({mask(value)})!")
        return value

    def _read_app(self, field: SecretField, key: str | None) -> str:
        secret = self.channels.app_secret()
        if secret is None:
            self.logger.info("App secret is not set")
            raise MissingSecretException(f"{field.label} is required in the app secret")

        self.redaction_filter.register(secret)
        if not self._app_secret_logged:
            self.logger.info(f"Got an app secret ({mask(secret)})!")
            self._app_secret_logged = True

        value = secret if key is None else self.channels.app_secret_field(key)
        if not value or not value.strip():
            raise MissingSecretException(f"{field.label} is required in the app secret")
        return value

    def _read_requester(self, field: SecretField, index: int) -> str:
        value = self.channels.requester_secret(index)
        if not value or not value.strip():
            self.logger.info(f"Requester secret {field.log_name} is not set")
            raise MissingSecretException(f"{field.label} is required")

        self.logger.info(f"Got requester secret {field.log_name} ({mask(value)})!")
        return value
