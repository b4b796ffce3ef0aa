from contextlib import asynccontextmanager

from core.exceptions import TransactionBroadcastException, TransactionFailedException
from transfer.entities import (
    NetworkEntity,
    PendingTransactionEntity,
    TransactionReceiptEntity,
)

SIGNING_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
WALLET_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
TARGET_ADDRESS = "0x000000000000000000000000000000000000dead"
BENEFICIARY_ADDRESS = "0x2222222222222222222222222222222222222222"
ESCROW_ADDRESS = "0x3333333333333333333333333333333333333333"
# first letter case flipped, so the checksum no longer matches
BAD_CHECKSUM_ADDRESS = "0xF39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RPC_URL = "https://rpc.example.org/v1/secret-api-key"
TX_HASH = "0xabc0000000000000000000000000000000000000000000000000000000000001"
ESCROW_TX_HASH = "0xdef0000000000000000000000000000000000000000000000000000000000002"
ETHER = 10 ** 18


class FakeChainClient:
    """
    In-memory chain client recording every call.

    Parameters
    ----------
    balance_wei : int
        Balance returned for the wallet
    available_wei : int
        Escrow amount available to invest
    receipt_status : int
        Status of the transfer receipt
    broadcast_error : str | None
        Error raised when broadcasting the transfer
    escrow_error : Exception | None
        Error raised when sending the escrow update
    """

    def __init__(
        self,
        balance_wei: int = 2 * ETHER,
        available_wei: int = 10 * ETHER,
        receipt_status: int = 1,
        broadcast_error: str | None = None,
        escrow_error: Exception | None = None
    ):
        self.balance_wei = balance_wei
        self.available_wei = available_wei
        self.receipt_status = receipt_status
        self.broadcast_error = broadcast_error
        self.escrow_error = escrow_error
        self.calls: list[tuple] = []

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def identify_network(self) -> NetworkEntity:
        self.calls.append(("identify_network",))
        return NetworkEntity(chain_name="sepolia", chain_id=11155111)

    def derive_wallet(self, signing_key: str) -> str:
        self.calls.append(("derive_wallet", signing_key))
        return WALLET_ADDRESS

    async def get_balance(self, address: str) -> int:
        self.calls.append(("get_balance", address))
        return self.balance_wei

    async def send_value_transfer(self, to: str, amount_wei: int) -> PendingTransactionEntity:
        self.calls.append(("send_value_transfer", to, amount_wei))
        if self.broadcast_error:
            raise TransactionBroadcastException(self.broadcast_error)
        return PendingTransactionEntity(transaction_hash=TX_HASH)

    async def await_confirmation(self, pending: PendingTransactionEntity) -> TransactionReceiptEntity:
        self.calls.append(("await_confirmation", pending.transaction_hash))
        status = self.receipt_status if pending.transaction_hash == TX_HASH else 1
        if status != 1:
            raise TransactionFailedException()
        return TransactionReceiptEntity(
            transaction_hash=pending.transaction_hash,
            status=status,
            block_number=42 if pending.transaction_hash == TX_HASH else 43,
            gas_used=21000 if pending.transaction_hash == TX_HASH else 50000
        )

    async def call_contract(self, contract_address, abi, method, *args):
        self.calls.append(("call_contract", contract_address, method, *args))
        return self.available_wei

    async def send_contract_transaction(self, contract_address, abi, method, *args) -> PendingTransactionEntity:
        self.calls.append(("send_contract_transaction", contract_address, method, *args))
        if self.escrow_error is not None:
            raise self.escrow_error
        return PendingTransactionEntity(transaction_hash=ESCROW_TX_HASH)


class FakeChainClientFactory:
    """
    Factory handing out a single fake chain client.

    Parameters
    ----------
    client : FakeChainClient
        Client yielded by ``connect``
    """

    def __init__(self, client: FakeChainClient):
        self.client = client
        self.connected_urls: list[str] = []

    @asynccontextmanager
    async def connect(self, rpc_url: str):
        self.connected_urls.append(rpc_url)
        yield self.client


