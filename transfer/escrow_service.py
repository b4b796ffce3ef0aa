import logging
from typing import Any

from web3 import AsyncWeb3

from core.environment.config import Settings
from core.exceptions import (
    ConfigurationException,
    InsufficientEscrowException,
)
from transfer.entities import EscrowConfirmed, EscrowFailed, EscrowUpdateOutcome
from transfer.services import ChainClient
from transfer.units import format_units

ESCROW_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "getAvailableToInvest",
        "stateMutability": "view",
        "inputs": [{"name": "beneficiary", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "markAsInvested",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "beneficiary", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [],
    },
]


class EscrowService:
    """
    Service for the escrow contract tracking what a beneficiary may still invest.

    Parameters
    ----------
    settings : Settings
        Task settings holding the escrow contract address
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, settings: Settings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger

    @property
    def contract_address(self) -> str:
        if not self.settings.escrow_contract_address:
            raise ConfigurationException("Escrow contract address is required")
        return self.settings.escrow_contract_address

    async def get_available_to_invest(self, client: ChainClient, beneficiary: str) -> int:
        """
        Read the amount the beneficiary may still have invested.

        Parameters
        ----------
        client : ChainClient
            Connected chain client
        beneficiary : str
            Beneficiary address

        Returns
        -------
        int
            Available amount in Wei
        """
        available = await client.call_contract(
            self.contract_address,
            ESCROW_ABI,
            "getAvailableToInvest",
            AsyncWeb3.to_checksum_address(beneficiary)
        )
        return int(available)

    async def ensure_available(self, client: ChainClient, beneficiary: str, amount_wei: int) -> int:
        """
        Check the escrow allowance covers the transfer.

        Parameters
        ----------
        client : ChainClient
            Connected chain client
        beneficiary : str
            Beneficiary address
        amount_wei : int
            Requested amount in Wei

        Returns
        -------
        int
            Available amount in Wei

        Raises
        ------
        InsufficientEscrowException
            If the available amount is below the requested amount
        """
        available = await self.get_available_to_invest(client, beneficiary)
        symbol = self.settings.currency_symbol
        self.logger.info(f"Available to invest for {beneficiary}: {format_units(available)} {symbol}")

        if available < amount_wei:
            raise InsufficientEscrowException(
                f"Insufficient escrow allowance for {beneficiary}. "
                f"Required: {format_units(amount_wei)} {symbol}, "
                f"Available: {format_units(available)} {symbol}"
            )
        return available

    async def mark_as_invested(
        self,
        client: ChainClient,
        beneficiary: str,
        amount_wei: int
    ) -> EscrowUpdateOutcome:
        """
        Record the transfer against the beneficiary allowance.

        Failures are reported in the outcome and never raised.

        Parameters
        ----------
        client : ChainClient
            Connected chain client
        beneficiary : str
            Beneficiary address
        amount_wei : int
            Transferred amount in Wei

        Returns
        -------
        EscrowUpdateOutcome
            Confirmed with the escrow transaction hash, or failed with a message
        """
        try:
            pending = await client.send_contract_transaction(
                self.contract_address,
                ESCROW_ABI,
                "markAsInvested",
                AsyncWeb3.to_checksum_address(beneficiary),
                amount_wei
            )
            self.logger.info(f"Escrow update sent: {pending.transaction_hash}")
            receipt = await client.await_confirmation(pending)
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or "Escrow update failed"
            self.logger.warning(f"Failed to mark {beneficiary} as invested: {message}")
            return EscrowFailed(message=message)

        self.logger.info(f"Escrow update confirmed in block {receipt.block_number}")
        return EscrowConfirmed(transaction_hash=receipt.transaction_hash)
