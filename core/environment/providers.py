import os
from collections.abc import Mapping

from dishka import Provider, Scope, provide
from core.environment.config import Settings


class EnvironmentProvider(Provider):
    """
    Provider for environment configuration.
    """

    component = "environment"
    scope = Scope.APP

    @provide
    def get_environment(self) -> Settings:
        """
        Provide task settings.

        Returns
        -------
        Settings
            Task settings instance
        """
        return Settings()

    @provide
    def get_environ(self) -> Mapping[str, str]:
        """
        Provide raw process environment for secret channels.

        Returns
        -------
        Mapping[str, str]
            Process environment
        """
        return os.environ
