import logging

import pytest

from core.environment.config import Settings
from tests.fakes import (
    ESCROW_ADDRESS,
    RPC_URL,
    SIGNING_KEY,
    TARGET_ADDRESS,
    FakeChainClient,
    FakeChainClientFactory,
)


@pytest.fixture
def logger() -> logging.Logger:
    """Logger for tests."""
    test_logger = logging.getLogger("stealth_transfer.tests")
    test_logger.setLevel(logging.DEBUG)
    return test_logger


@pytest.fixture
def settings(tmp_path) -> Settings:
    """
    Settings writing into a temporary output directory.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory

    Returns
    -------
    Settings
        Task settings
    """
    return Settings(
        _env_file=None,
        iexec_out=tmp_path / "iexec_out",
        escrow_contract_address=ESCROW_ADDRESS
    )


@pytest.fixture
def chain_client() -> FakeChainClient:
    """Fake chain client with enough balance for a 1.5 ETH transfer."""
    return FakeChainClient()


@pytest.fixture
def chain_client_factory(chain_client: FakeChainClient) -> FakeChainClientFactory:
    """Factory yielding the fake chain client."""
    return FakeChainClientFactory(chain_client)


@pytest.fixture
def secret_env() -> dict[str, str]:
    """
    Environment of a complete run.

    Returns
    -------
    dict[str, str]
        App secret with lender key and target, requester secrets with
        amount and RPC URL
    """
    return {
        "IEXEC_APP_DEVELOPER_SECRET": (
            f'{{"lenderAddress": "{SIGNING_KEY}", "targetAddress": "{TARGET_ADDRESS}"}}'
        ),
        "IEXEC_REQUESTER_SECRET_1": "1.5",
        "IEXEC_REQUESTER_SECRET_2": RPC_URL,
    }
