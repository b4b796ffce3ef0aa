import logging
import sys
from dishka import Provider, provide, Scope


def mask(value: str) -> str:
    """
    Replace every character of a secret with ``*``.

    Parameters
    ----------
    value : str
        Secret value

    Returns
    -------
    str
        Masked value of the same length
    """
    return "*" * len(value)


class SecretRedactionFilter(logging.Filter):
    """
    Logging filter masking registered secret values in log records.
    """

    def __init__(self):
        super().__init__()
        self._secrets: set[str] = set()

    def register(self, value: str) -> None:
        """
        Register a secret value to be masked.

        Parameters
        ----------
        value : str
            Secret value
        """
        if value:
            self._secrets.add(value)

    def redact(self, text: str) -> str:
        # longest first so a secret containing another is masked whole
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = text.replace(secret, mask(secret))
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if self._secrets:
            message = record.getMessage()
            redacted = self.redact(message)
            if redacted != message:
                record.msg = redacted
                record.args = None
        return True


class LoggerProvider(Provider):
    """
    Provider for logging configuration and logger instances.

    Configures logging to output to console (stdout) with INFO level.
    """
    component = "logger"

    @provide(scope=Scope.APP)
    def get_redaction_filter(self) -> SecretRedactionFilter:
        """
        Provide the secret redaction filter shared by the run.

        Returns
        -------
        SecretRedactionFilter
            Redaction filter
        """
        return SecretRedactionFilter()

    @provide(scope=Scope.APP)
    def get_logger(self, redaction_filter: SecretRedactionFilter) -> logging.Logger:
        """
        Provide configured logger instance.

        Parameters
        ----------
        redaction_filter : SecretRedactionFilter
            Filter masking resolved secrets

        Returns
        -------
        logging.Logger
            Configured logger that writes to console
        """
        if not logging.getLogger().handlers:
            logging.basicConfig(
                level=logging.INFO,
                format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                handlers=[
                    logging.StreamHandler(sys.stdout)
                ]
            )

        logger = logging.getLogger("stealth_transfer")
        logger.setLevel(logging.INFO)
        # one filter per logger, the one of the newest container
        for stale in [f for f in logger.filters if isinstance(f, SecretRedactionFilter)]:
            logger.removeFilter(stale)
        logger.addFilter(redaction_filter)
        return logger
