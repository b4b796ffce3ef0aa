from abc import ABC
from enum import Enum

DEFAULT_ERROR_MESSAGE = "Oops something went wrong"


class ErrorCategory(str, Enum):
    """
    Error taxonomy of a transfer run.
    """
    CONFIGURATION = "configuration"
    CONNECTIVITY = "connectivity"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ON_CHAIN = "on_chain"


class BaseCustomException(Exception, ABC):
    """
    Base class for all custom exceptions.
    """

    def __init__(self, message: str | None = None):
        self.message = message or self.get_default_message()
        super().__init__(self.message)

    def get_default_message(self) -> str:
        """
        Return default error message.

        Returns
        -------
        str
            Default error message
        """
        return DEFAULT_ERROR_MESSAGE

    def get_category(self) -> ErrorCategory:
        """
        Return error category of the exception.

        Returns
        -------
        ErrorCategory
            Error category
        """
        return ErrorCategory.CONNECTIVITY


class ConfigurationException(BaseCustomException):
    """Missing or invalid input, detected before any network I/O."""

    def get_category(self) -> ErrorCategory:
        return ErrorCategory.CONFIGURATION


class MissingSecretException(ConfigurationException):
    """Required secret is absent from its channel."""

    def get_default_message(self) -> str:
        return "Secret is required"


class InvalidAddressException(ConfigurationException):
    """Invalid address exception."""

    def get_default_message(self) -> str:
        return "Invalid address"


class InvalidAmountException(ConfigurationException):
    """Invalid amount exception."""

    def get_default_message(self) -> str:
        return "Invalid amount"


class InvalidSigningKeyException(ConfigurationException):
    """Invalid private key material."""

    def get_default_message(self) -> str:
        return "Invalid lender private key"


class ProtectedDataException(ConfigurationException):
    """Protected data could not be read."""

    def get_default_message(self) -> str:
        return "Failed to get lender private key from protected data"


class RPCException(BaseCustomException):
    """RPC error exception."""

    def get_default_message(self) -> str:
        return "RPC request failed"


class ConfirmationTimeoutException(RPCException):
    """Receipt did not show up in time."""

    def get_default_message(self) -> str:
        return "Transaction confirmation timed out"


class InsufficientFundsException(BaseCustomException):
    """Signer balance below the requested amount."""

    def get_default_message(self) -> str:
        return "Insufficient balance"

    def get_category(self) -> ErrorCategory:
        return ErrorCategory.INSUFFICIENT_FUNDS


class InsufficientEscrowException(InsufficientFundsException):
    """Escrow allowance below the requested amount."""

    def get_default_message(self) -> str:
        return "Insufficient escrow allowance"


class OnChainException(BaseCustomException):
    """Transaction rejected or reverted by the chain."""

    def get_category(self) -> ErrorCategory:
        return ErrorCategory.ON_CHAIN


class TransactionBroadcastException(OnChainException):
    """Transaction could not be broadcast."""

    def get_default_message(self) -> str:
        return "Transaction broadcast failed"


class TransactionFailedException(OnChainException):
    """Transaction mined with failure status."""

    def get_default_message(self) -> str:
        return "Transaction failed"

