import logging

from web3 import AsyncWeb3

from core.environment.config import Settings
from core.exception_handler import failure_from_exception
from core.exceptions import (
    InsufficientFundsException,
    InvalidAddressException,
    InvalidAmountException,
)
from credentials.resolver import SecretResolver
from credentials.schemas import TransferRequest
from result.schemas import ResultArtifact
from result.writer import ResultWriter
from transfer.entities import (
    EscrowNotAttempted,
    TransferFailure,
    TransferOutcome,
    TransferSuccess,
    WalletStateEntity,
)
from transfer.escrow_service import EscrowService
from transfer.services import ChainClientFactory
from transfer.units import format_units, parse_units


def is_valid_address(address: str) -> bool:
    """
    Check an address, enforcing the checksum when the casing is mixed.

    Parameters
    ----------
    address : str
        Hex address

    Returns
    -------
    bool
        True if the address is well formed and, in mixed case, checksummed
    """
    if not AsyncWeb3.is_address(address):
        return False
    digits = address[2:] if address[:2].lower() == "0x" else address
    if digits == digits.lower() or digits == digits.upper():
        return True
    return AsyncWeb3.is_checksum_address(address)


class ExecuteStealthTransferUseCase:
    """
    Use case moving native currency from the lender wallet to the target.

    Steps run strictly in order: validation, balance check, escrow check,
    broadcast, confirmation, escrow update. Every step but the escrow update
    is fatal and raises; nothing is retried.

    Parameters
    ----------
    chain_client_factory : ChainClientFactory
        Factory opening the chain client of the run
    escrow_service : EscrowService
        Escrow capability, used only when the request names a beneficiary
    settings : Settings
        Task settings
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        chain_client_factory: ChainClientFactory,
        escrow_service: EscrowService,
        settings: Settings,
        logger: logging.Logger
    ):
        self.chain_client_factory = chain_client_factory
        self.escrow_service = escrow_service
        self.settings = settings
        self.logger = logger

    async def __call__(self, request: TransferRequest) -> TransferSuccess:
        """
        Execute use case.

        Parameters
        ----------
        request : TransferRequest
            Resolved transfer inputs

        Returns
        -------
        TransferSuccess
            Confirmed transfer

        Raises
        ------
        ConfigurationException
            If an address, the amount or the escrow configuration is invalid
        InsufficientFundsException
            If the wallet balance or the escrow allowance is too low
        OnChainException
            If the transfer is rejected or reverted
        """
        symbol = self.settings.currency_symbol
        self.logger.info("Starting stealth transfer...")
        amount_wei = self._validate(request)

        async with self.chain_client_factory.connect(request.rpc_url.get_secret_value()) as client:
            network = await client.identify_network()
            self.logger.info(f"Connected to network: {network.chain_name} Chain ID: {network.chain_id}")

            address = client.derive_wallet(request.signing_key.get_secret_value())
            self.logger.info(f"Wallet address: {address}")
            self.logger.info(f"Transfer amount: {format_units(amount_wei)} {symbol}")

            wallet = WalletStateEntity(
                address=address,
                balance_wei=await client.get_balance(address)
            )
            self.logger.info(f"Wallet balance: {format_units(wallet.balance_wei)} {symbol}")
            if wallet.balance_wei < amount_wei:
                raise InsufficientFundsException(
                    f"Insufficient balance. Required: {format_units(amount_wei)} {symbol}, "
                    f"Available: {format_units(wallet.balance_wei)} {symbol}"
                )

            if request.beneficiary_address:
                await self.escrow_service.ensure_available(client, request.beneficiary_address, amount_wei)

            self.logger.info("Sending transaction...")
            pending = await client.send_value_transfer(request.target_address, amount_wei)
            self.logger.info(f"Transaction sent: {pending.transaction_hash}")

            self.logger.info("Waiting for confirmation...")
            receipt = await client.await_confirmation(pending)
            self.logger.info("Transaction confirmed!")
            self.logger.info(f"Block number: {receipt.block_number}")
            self.logger.info(f"Gas used: {receipt.gas_used}")

            escrow_update = EscrowNotAttempted()
            if request.beneficiary_address:
                escrow_update = await self.escrow_service.mark_as_invested(
                    client, request.beneficiary_address, amount_wei
                )

        return TransferSuccess(
            transaction_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            escrow_update=escrow_update
        )

    def _validate(self, request: TransferRequest) -> int:
        """
        Check addresses and amount before any network call.

        Parameters
        ----------
        request : TransferRequest
            Resolved transfer inputs

        Returns
        -------
        int
            Requested amount in Wei
        """
        if not is_valid_address(request.target_address):
            raise InvalidAddressException(f"Invalid target address: {request.target_address}")

        if request.beneficiary_address:
            if not is_valid_address(request.beneficiary_address):
                raise InvalidAddressException(f"Invalid beneficiary address: {request.beneficiary_address}")
            contract_address = self.escrow_service.contract_address
            if not is_valid_address(contract_address):
                raise InvalidAddressException(f"Invalid escrow contract address: {contract_address}")

        try:
            return parse_units(request.amount)
        except ValueError:
            raise InvalidAmountException(f"Invalid amount: {request.amount}") from None


class RunStealthTransferTask:
    """
    Use case running the whole task once and always writing its result.

    Parameters
    ----------
    resolver : SecretResolver
        Secret resolver
    transfer : ExecuteStealthTransferUseCase
        Transfer use case
    writer : ResultWriter
        Result writer
    logger : logging.Logger
        Logger instance
    """

    def __init__(
        self,
        resolver: SecretResolver,
        transfer: ExecuteStealthTransferUseCase,
        writer: ResultWriter,
        logger: logging.Logger
    ):
        self.resolver = resolver
        self.transfer = transfer
        self.writer = writer
        self.logger = logger

    async def __call__(self) -> ResultArtifact:
        """
        Execute use case.

        Returns
        -------
        ResultArtifact
            Descriptor written for the run
        """
        outcome: TransferOutcome = TransferFailure(message="Transfer was interrupted")
        try:
            request = self.resolver.resolve()
            outcome = await self.transfer(request)
        except Exception as e:
            outcome = failure_from_exception(e, self.logger)
        finally:
            artifact = self.writer.write(outcome)
        return artifact
