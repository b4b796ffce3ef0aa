import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from aiohttp import ClientTimeout
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from core.environment.config import Settings
from core.exceptions import (
    ConfirmationTimeoutException,
    InvalidSigningKeyException,
    TransactionBroadcastException,
    TransactionFailedException,
)
from transfer.entities import (
    NetworkEntity,
    PendingTransactionEntity,
    TransactionReceiptEntity,
)

CHAIN_NAMES = {
    1: "mainnet",
    10: "optimism",
    56: "bnb",
    100: "xdai",
    134: "bellecour",
    137: "matic",
    8453: "base",
    17000: "holesky",
    42161: "arbitrum",
    43114: "avalanche",
    421614: "arbitrum-sepolia",
    11155111: "sepolia",
}


class ChainClient:
    """
    Facade over one RPC endpoint and one signing key for a single run.

    Parameters
    ----------
    web3 : AsyncWeb3
        Web3 client connected to the endpoint
    logger : logging.Logger
        Logger instance
    confirmation_timeout : float
        Seconds to wait for a receipt
    poll_interval : float
        Seconds between receipt polls
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        logger: logging.Logger,
        confirmation_timeout: float,
        poll_interval: float
    ):
        self.web3 = web3
        self.logger = logger
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self._account = None
        self._chain_id: int | None = None

    @property
    def address(self) -> str:
        if self._account is None:
            raise InvalidSigningKeyException("Wallet is not derived")
        return self._account.address

    async def identify_network(self) -> NetworkEntity:
        """
        Query the chain id of the endpoint.

        Returns
        -------
        NetworkEntity
            Network name and chain id
        """
        chain_id = int(await self.web3.eth.chain_id)
        self._chain_id = chain_id
        return NetworkEntity(
            chain_name=CHAIN_NAMES.get(chain_id, "unknown"),
            chain_id=chain_id
        )

    def derive_wallet(self, signing_key: str) -> str:
        """
        Load the signing key and return the signer address.

        Parameters
        ----------
        signing_key : str
            Hex encoded private key

        Returns
        -------
        str
            Checksum address of the signer

        Raises
        ------
        InvalidSigningKeyException
            If the key material is not a valid private key
        """
        try:
            self._account = self.web3.eth.account.from_key(signing_key)
        except Exception as e:
            raise InvalidSigningKeyException() from e
        return self._account.address

    async def get_balance(self, address: str) -> int:
        """
        Get current balance of an address in Wei.

        Parameters
        ----------
        address : str
            Wallet address

        Returns
        -------
        int
            Balance in Wei
        """
        checksum_address = self.web3.to_checksum_address(address)
        return int(await self.web3.eth.get_balance(checksum_address))

    async def send_value_transfer(self, to: str, amount_wei: int) -> PendingTransactionEntity:
        """
        Build, sign and broadcast a native value transfer.

        Parameters
        ----------
        to : str
            Recipient address
        amount_wei : int
            Amount in Wei

        Returns
        -------
        PendingTransactionEntity
            Broadcast transaction handle

        Raises
        ------
        TransactionBroadcastException
            If the transaction could not be prepared or broadcast
        """
        try:
            transaction = {
                "from": self.address,
                "to": self.web3.to_checksum_address(to),
                "value": amount_wei,
            }
            transaction["gas"] = await self.web3.eth.estimate_gas(transaction)
            transaction["nonce"] = await self.web3.eth.get_transaction_count(self.address, "pending")
            transaction["chainId"] = await self._get_chain_id()
            transaction.update(await self._get_fee_fields())
            self.logger.debug(f"Transaction prepared: nonce {transaction['nonce']}, gas {transaction['gas']}")
            return await self._sign_and_send(transaction)
        except TransactionBroadcastException:
            raise
        except Exception as e:
            raise TransactionBroadcastException(self._error_message(e)) from e

    async def await_confirmation(self, pending: PendingTransactionEntity) -> TransactionReceiptEntity:
        """
        Wait until a transaction is mined.

        Parameters
        ----------
        pending : PendingTransactionEntity
            Broadcast transaction handle

        Returns
        -------
        TransactionReceiptEntity
            Receipt of the successful transaction

        Raises
        ------
        ConfirmationTimeoutException
            If no receipt shows up within the confirmation timeout
        TransactionFailedException
            If the transaction was mined but reverted
        """
        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                pending.transaction_hash,
                timeout=self.confirmation_timeout,
                poll_latency=self.poll_interval
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutException(
                f"Transaction {pending.transaction_hash} was not mined within "
                f"{self.confirmation_timeout:g} seconds"
            ) from e

        result = TransactionReceiptEntity(
            transaction_hash=pending.transaction_hash,
            status=int(receipt["status"]),
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"])
        )
        if result.status != 1:
            raise TransactionFailedException()
        return result

    async def call_contract(
        self,
        contract_address: str,
        abi: list[dict[str, Any]],
        method: str,
        *args: Any
    ) -> Any:
        """
        Call a view function of a contract.

        Parameters
        ----------
        contract_address : str
            Contract address
        abi : list[dict[str, Any]]
            Contract ABI
        method : str
            Function name
        *args : Any
            Function arguments

        Returns
        -------
        Any
            Decoded return value
        """
        contract = self._get_contract(contract_address, abi)
        return await getattr(contract.functions, method)(*args).call()

    async def send_contract_transaction(
        self,
        contract_address: str,
        abi: list[dict[str, Any]],
        method: str,
        *args: Any
    ) -> PendingTransactionEntity:
        """
        Sign and broadcast a contract function call from the signer.

        Parameters
        ----------
        contract_address : str
            Contract address
        abi : list[dict[str, Any]]
            Contract ABI
        method : str
            Function name
        *args : Any
            Function arguments

        Returns
        -------
        PendingTransactionEntity
            Broadcast transaction handle
        """
        contract = self._get_contract(contract_address, abi)
        try:
            transaction = await getattr(contract.functions, method)(*args).build_transaction({
                "from": self.address,
                "nonce": await self.web3.eth.get_transaction_count(self.address, "pending"),
                "chainId": await self._get_chain_id(),
            })
            return await self._sign_and_send(transaction)
        except Exception as e:
            raise TransactionBroadcastException(self._error_message(e)) from e

    def _get_contract(self, contract_address: str, abi: list[dict[str, Any]]):
        checksum_address = self.web3.to_checksum_address(contract_address)
        return self.web3.eth.contract(address=checksum_address, abi=abi)

    async def _get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(await self.web3.eth.chain_id)
        return self._chain_id

    async def _get_fee_fields(self) -> dict[str, int]:
        """
        Get fee fields from the network, EIP-1559 when supported.

        Returns
        -------
        dict[str, int]
            Either maxFeePerGas/maxPriorityFeePerGas or gasPrice
        """
        latest_block = await self.web3.eth.get_block("latest")
        base_fee = latest_block.get("baseFeePerGas")
        if base_fee is None:
            return {"gasPrice": int(await self.web3.eth.gas_price)}

        priority_fee = int(await self.web3.eth.max_priority_fee)
        return {
            "maxFeePerGas": int(base_fee) * 2 + priority_fee,
            "maxPriorityFeePerGas": priority_fee,
        }

    async def _sign_and_send(self, transaction: dict[str, Any]) -> PendingTransactionEntity:
        signed = self._account.sign_transaction(transaction)
        tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return PendingTransactionEntity(transaction_hash=self.web3.to_hex(tx_hash))

    @staticmethod
    def _error_message(error: Exception) -> str:
        message = getattr(error, "message", None)
        if isinstance(message, str) and message:
            return message
        return str(error)


class ChainClientFactory:
    """
    Factory opening a chain client for an RPC URL known only at run time.

    Parameters
    ----------
    settings : Settings
        Task settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, settings: Settings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger

    @asynccontextmanager
    async def connect(self, rpc_url: str) -> AsyncIterator[ChainClient]:
        """
        Open a chain client and disconnect it on exit.

        Parameters
        ----------
        rpc_url : str
            JSON-RPC endpoint

        Yields
        ------
        ChainClient
            Chain client bound to the endpoint
        """
        provider = AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": ClientTimeout(total=self.settings.rpc_request_timeout)}
        )
        web3 = AsyncWeb3(provider)
        try:
            yield ChainClient(
                web3=web3,
                logger=self.logger,
                confirmation_timeout=self.settings.confirmation_timeout,
                poll_interval=self.settings.confirmation_poll_interval
            )
        finally:
            await provider.disconnect()
