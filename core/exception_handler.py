import logging

from core.exceptions import BaseCustomException, DEFAULT_ERROR_MESSAGE, ErrorCategory
from transfer.entities import TransferFailure


def failure_from_exception(exc: BaseException, logger: logging.Logger) -> TransferFailure:
    """
    Handler mapping an exception that stopped the run to a failure outcome.

    Parameters
    ----------
    exc : BaseException
        Exception raised by any step of the run
    logger : logging.Logger
        Logger instance

    Returns
    -------
    TransferFailure
        Failure carrying the error message
    """
    if isinstance(exc, BaseCustomException):
        category = exc.get_category()
        message = exc.message
    else:
        category = ErrorCategory.CONNECTIVITY
        message = str(exc)

    message = message or DEFAULT_ERROR_MESSAGE
    logger.error(f"Error ({category.value}): {message}")
    if not isinstance(exc, BaseCustomException):
        logger.debug("Unexpected error", exc_info=exc)

    return TransferFailure(message=message)
