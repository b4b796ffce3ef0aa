from dishka import make_async_container

from core.environment.providers import EnvironmentProvider
from core.logging.providers import LoggerProvider
from credentials.providers import CredentialsProvider
from result.providers import ResultProvider
from transfer.providers import TransferProvider


def build_container():
    return make_async_container(
        EnvironmentProvider(),
        LoggerProvider(),
        CredentialsProvider(),
        ResultProvider(),
        TransferProvider()
    )
