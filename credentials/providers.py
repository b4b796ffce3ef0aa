from collections.abc import Mapping
from typing import Annotated
import logging

from dishka import Provider, Scope, provide, FromComponent
from core.environment.config import Settings
from core.logging.providers import SecretRedactionFilter
from credentials.channels import ProtectedDataReader, SecretChannels
from credentials.resolver import SecretResolver


class CredentialsProvider(Provider):
    """
    Provider for secret channels and the secret resolver.
    """

    component = "credentials"

    @provide(scope=Scope.APP)
    def get_secret_channels(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        environ: Annotated[Mapping[str, str], FromComponent("environment")]
    ) -> SecretChannels:
        """
        Provide secret channels.

        Parameters
        ----------
        settings : Settings
            Task settings
        environ : Mapping[str, str]
            Process environment

        Returns
        -------
        SecretChannels
            Secret channels instance
        """
        return SecretChannels(
            environ=environ,
            protected_data=ProtectedDataReader(settings.protected_data_path)
        )

    @provide(scope=Scope.REQUEST)
    def get_secret_resolver(
        self,
        settings: Annotated[Settings, FromComponent("environment")],
        channels: Annotated[SecretChannels, FromComponent("credentials")],
        redaction_filter: Annotated[SecretRedactionFilter, FromComponent("logger")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> SecretResolver:
        """
        Provide secret resolver.

        Parameters
        ----------
        settings : Settings
            Task settings
        channels : SecretChannels
            Secret channels instance
        redaction_filter : SecretRedactionFilter
            Log redaction filter
        logger : logging.Logger
            Logger instance

        Returns
        -------
        SecretResolver
            Secret resolver instance
        """
        return SecretResolver(
            settings=settings,
            channels=channels,
            redaction_filter=redaction_filter,
            logger=logger
        )
