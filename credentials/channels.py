import json
import zipfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from core.exceptions import ConfigurationException


class ProtectedDataReader:
    """
    Reader for the protected data archive mounted in the input directory.

    Parameters
    ----------
    path : Path | None
        Archive path, None when no protected data is mounted
    """

    def __init__(self, path: Path | None):
        self.path = path

    def get_value(self, field: str) -> str:
        """
        Read a string field of the archive.

        Parameters
        ----------
        field : str
            Field name, nested fields separated by dots

        Returns
        -------
        str
            Field value

        Raises
        ------
        FileNotFoundError
            If no protected data is mounted
        KeyError
            If the field is not in the archive
        """
        if self.path is None:
            raise FileNotFoundError("Protected data is not available")

        with zipfile.ZipFile(self.path) as archive:
            return archive.read(field.replace(".", "/")).decode("utf-8")


class SecretChannels:
    """
    Access to the operator, caller and protected data channels.

    Parameters
    ----------
    environ : Mapping[str, str]
        Process environment
    protected_data : ProtectedDataReader
        Protected data reader
    """

    APP_SECRET_VAR = "IEXEC_APP_DEVELOPER_SECRET"
    REQUESTER_SECRET_VAR = "IEXEC_REQUESTER_SECRET_{index}"

    def __init__(self, environ: Mapping[str, str], protected_data: ProtectedDataReader):
        self.environ = environ
        self.protected_data = protected_data

    def app_secret(self) -> str | None:
        return self.environ.get(self.APP_SECRET_VAR) or None

    def app_secret_field(self, key: str) -> str | None:
        """
        Read a field of the app secret parsed as a JSON object.

        Parameters
        ----------
        key : str
            JSON field name

        Returns
        -------
        str | None
            Field value, None when the secret or the field is absent

        Raises
        ------
        ConfigurationException
            If the app secret is not a JSON object
        """
        secret = self.app_secret()
        if secret is None:
            return None

        try:
            document: Any = json.loads(secret)
        except json.JSONDecodeError:
            raise ConfigurationException("App secret is not valid JSON") from None
        if not isinstance(document, dict):
            raise ConfigurationException("App secret is not valid JSON")

        value = document.get(key)
        if value is None or value == "":
            return None
        return str(value)

    def requester_secret(self, index: int) -> str | None:
        return self.environ.get(self.REQUESTER_SECRET_VAR.format(index=index)) or None

    def protected_field(self, key: str) -> str:
        return self.protected_data.get_value(key)
