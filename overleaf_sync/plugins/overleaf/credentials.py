"""Credential persistence for the Overleaf plugin.

The credential record is a small JSON document read by the external
Overleaf scripts:

    {
      "serverUrl": "https://www.overleaf.com",
      "type": "cookie",
      "cookie": "<session cookie>"
    }
"""

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .config_loader import CREDENTIALS_FILENAME

logger = logging.getLogger(__name__)


class AuthType(str, Enum):
    """How the external scripts authenticate against the server."""
    COOKIE = "cookie"


class CredentialStoreError(Exception):
    """Raised when the credential file cannot be written or read."""

    def __init__(self, message: str, path: Path):
        self.path = path
        super().__init__(f"{message}: {path}")


@dataclass
class CredentialRecord:
    """Single-session credential record."""
    server_url: str
    secret: str
    auth_type: AuthType = AuthType.COOKIE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serverUrl": self.server_url,
            "type": self.auth_type.value,
            "cookie": self.secret,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRecord":
        return cls(
            server_url=data["serverUrl"],
            secret=data["cookie"],
            auth_type=AuthType(data.get("type", AuthType.COOKIE.value)),
        )


class CredentialStore:
    """Persists the credential record under the config directory."""

    def __init__(self, config_dir: Path, server_url: str):
        self._config_dir = Path(config_dir)
        self._server_url = server_url

    @property
    def path(self) -> Path:
        return self._config_dir / CREDENTIALS_FILENAME

    def save(self, secret: str) -> Path:
        """Write the credential record, overwriting any previous one.

        Args:
            secret: Session cookie, stored verbatim.

        Returns:
            Path of the written credential file.

        Raises:
            CredentialStoreError: If the directory or file cannot be written.
        """
        record = CredentialRecord(server_url=self._server_url, secret=secret)
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CredentialStoreError(f"Cannot create config directory ({e.strerror})", self._config_dir) from e

        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                # O_CREAT's mode does not apply to a file that already exists
                os.chmod(self.path, 0o600)
                json.dump(record.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise CredentialStoreError(f"Cannot write credentials ({e.strerror})", self.path) from e

        logger.info("Saved %s credentials for %s", record.auth_type.value, self._server_url)
        return self.path

    def load(self) -> Optional[CredentialRecord]:
        """Read the credential record.

        Returns:
            The stored record, or None if no credentials were saved yet.

        Raises:
            CredentialStoreError: If the file exists but cannot be parsed.
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return CredentialRecord.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CredentialStoreError(f"Cannot read credentials ({e})", self.path) from e
