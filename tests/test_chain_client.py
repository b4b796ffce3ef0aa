import logging
from unittest.mock import AsyncMock, patch

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from core.environment.config import Settings
from core.exceptions import (
    ConfirmationTimeoutException,
    InvalidSigningKeyException,
    TransactionBroadcastException,
    TransactionFailedException,
)
from transfer.entities import PendingTransactionEntity
from transfer.services import ChainClient, ChainClientFactory
from tests.fakes import SIGNING_KEY, TARGET_ADDRESS, TX_HASH, WALLET_ADDRESS


async def _value(value):
    return value


class StubEth:
    """
    Stand-in for ``AsyncWeb3.eth`` with awaitable properties.
    """

    account = Account

    def __init__(self, chain_id: int = 11155111, block: dict | None = None):
        self._chain_id = chain_id
        self.get_balance = AsyncMock(return_value=2 * 10 ** 18)
        self.estimate_gas = AsyncMock(return_value=21000)
        self.get_transaction_count = AsyncMock(return_value=7)
        self.get_block = AsyncMock(return_value={"baseFeePerGas": 10} if block is None else block)
        self.send_raw_transaction = AsyncMock(return_value=HexBytes(TX_HASH))
        self.wait_for_transaction_receipt = AsyncMock(
            return_value={"status": 1, "blockNumber": 42, "gasUsed": 21000}
        )

    @property
    def chain_id(self):
        return _value(self._chain_id)

    @property
    def max_priority_fee(self):
        return _value(2)

    @property
    def gas_price(self):
        return _value(5)


class StubWeb3:
    to_checksum_address = staticmethod(AsyncWeb3.to_checksum_address)
    to_hex = staticmethod(AsyncWeb3.to_hex)

    def __init__(self, eth: StubEth):
        self.eth = eth


def make_client(eth: StubEth | None = None) -> ChainClient:
    return ChainClient(
        web3=StubWeb3(eth or StubEth()),
        logger=logging.getLogger("stealth_transfer.tests"),
        confirmation_timeout=5,
        poll_interval=0.1
    )


class TestChainClient:
    """
    Unit tests for the chain client over a stubbed web3 client.
    """

    @pytest.mark.asyncio
    async def test_identify_known_network(self):
        network = await make_client().identify_network()
        assert network.chain_name == "sepolia"
        assert network.chain_id == 11155111

    @pytest.mark.asyncio
    async def test_identify_unknown_network(self):
        network = await make_client(StubEth(chain_id=999999)).identify_network()
        assert network.chain_name == "unknown"

    def test_derive_wallet(self):
        assert make_client().derive_wallet(SIGNING_KEY) == WALLET_ADDRESS

    def test_invalid_key_does_not_leak(self):
        with pytest.raises(InvalidSigningKeyException) as exc_info:
            make_client().derive_wallet("0xnot-a-key")
        assert exc_info.value.message == "Invalid lender private key"
        assert "not-a-key" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_send_value_transfer(self):
        eth = StubEth()
        client = make_client(eth)
        client.derive_wallet(SIGNING_KEY)

        pending = await client.send_value_transfer(TARGET_ADDRESS, 10 ** 18)

        assert pending.transaction_hash == TX_HASH
        estimate_args = eth.estimate_gas.await_args.args[0]
        assert estimate_args["from"] == WALLET_ADDRESS
        assert estimate_args["to"] == AsyncWeb3.to_checksum_address(TARGET_ADDRESS)
        assert estimate_args["value"] == 10 ** 18
        eth.get_transaction_count.assert_awaited_with(WALLET_ADDRESS, "pending")
        eth.send_raw_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_eip1559_fee_fields(self):
        fees = await make_client()._get_fee_fields()
        assert fees == {"maxFeePerGas": 22, "maxPriorityFeePerGas": 2}

    @pytest.mark.asyncio
    async def test_legacy_fee_fields(self):
        fees = await make_client(StubEth(block={}))._get_fee_fields()
        assert fees == {"gasPrice": 5}

    @pytest.mark.asyncio
    async def test_broadcast_error(self):
        eth = StubEth()
        eth.send_raw_transaction.side_effect = ValueError("nonce too low")
        client = make_client(eth)
        client.derive_wallet(SIGNING_KEY)

        with pytest.raises(TransactionBroadcastException) as exc_info:
            await client.send_value_transfer(TARGET_ADDRESS, 10 ** 18)
        assert exc_info.value.message == "nonce too low"

    @pytest.mark.asyncio
    async def test_await_confirmation(self):
        receipt = await make_client().await_confirmation(PendingTransactionEntity(transaction_hash=TX_HASH))

        assert receipt.transaction_hash == TX_HASH
        assert receipt.block_number == 42
        assert receipt.gas_used == 21000

    @pytest.mark.asyncio
    async def test_reverted_receipt(self):
        eth = StubEth()
        eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 42, "gasUsed": 21000}

        with pytest.raises(TransactionFailedException) as exc_info:
            await make_client(eth).await_confirmation(PendingTransactionEntity(transaction_hash=TX_HASH))
        assert exc_info.value.message == "Transaction failed"

    @pytest.mark.asyncio
    async def test_confirmation_timeout(self):
        eth = StubEth()
        eth.wait_for_transaction_receipt.side_effect = TimeExhausted("timed out")

        with pytest.raises(ConfirmationTimeoutException) as exc_info:
            await make_client(eth).await_confirmation(PendingTransactionEntity(transaction_hash=TX_HASH))
        assert TX_HASH in exc_info.value.message
        assert not isinstance(exc_info.value, TransactionFailedException)


class TestChainClientFactory:
    """
    Unit tests for the chain client factory.
    """

    @pytest.mark.asyncio
    async def test_connect_disconnects_on_exit(self, settings: Settings):
        factory = ChainClientFactory(settings=settings, logger=logging.getLogger("stealth_transfer.tests"))

        with patch("transfer.services.AsyncWeb3") as web3_cls:
            provider = web3_cls.AsyncHTTPProvider.return_value
            provider.disconnect = AsyncMock()

            async with factory.connect("https://rpc.example.org") as client:
                assert client.web3 is web3_cls.return_value
                assert client.confirmation_timeout == settings.confirmation_timeout

            provider.disconnect.assert_awaited_once()
        assert web3_cls.AsyncHTTPProvider.call_args.args[0] == "https://rpc.example.org"
