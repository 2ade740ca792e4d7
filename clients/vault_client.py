"""
HashiCorp Vault client for IndiePilot secrets.

AppRole authentication; every path is scoped under 'indiepilot/'.
Missing configuration fails at startup rather than at first use.
"""

import os
import logging
from typing import Dict, Iterable

import hvac
from hvac.exceptions import Forbidden, InvalidPath, InvalidRequest, Unauthorized

logger = logging.getLogger(__name__)

_SECRET_PREFIX = "indiepilot"

_vault_client_instance: "VaultClient | None" = None
_secret_cache: Dict[str, str] = {}


class VaultError(Exception):
    """A required secret could not be read."""


class VaultClient:
    """AppRole-authenticated KV v2 reader configured from the environment."""

    def __init__(self, vault_addr: str | None = None, vault_namespace: str | None = None):
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        role_id = os.getenv("VAULT_ROLE_ID")
        secret_id = os.getenv("VAULT_SECRET_ID")

        if not self.vault_addr:
            raise VaultError("VAULT_ADDR environment variable is required")
        if not role_id or not secret_id:
            raise VaultError("VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required")

        client_kwargs = {"url": self.vault_addr}
        if self.vault_namespace:
            client_kwargs["namespace"] = self.vault_namespace
        self.client = hvac.Client(**client_kwargs)

        try:
            auth = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
        except (Unauthorized, Forbidden, InvalidRequest) as e:
            logger.error(f"AppRole login rejected: {e}")
            raise VaultError(f"AppRole authentication failed: {e}") from e
        self.client.token = auth["auth"]["client_token"]

        if not self.client.is_authenticated():
            raise VaultError("Vault token not accepted after AppRole login")

        logger.info(f"Vault client initialized: {self.vault_addr}")

    def get_secret(self, path: str, field: str) -> str:
        """
        Read one field of `indiepilot/<path>`.

        Raises:
            VaultError: Path missing, access denied or field absent
        """
        full_path = f"{_SECRET_PREFIX}/{path}"
        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath as e:
            raise VaultError(f"Secret path '{full_path}' not found") from e
        except (Unauthorized, Forbidden) as e:
            logger.error(f"Access denied to secret {full_path}: {e}")
            raise VaultError(f"Access denied to secret '{full_path}'") from e

        data = response["data"]["data"]
        if field not in data:
            raise VaultError(
                f"Field '{field}' not found in secret '{full_path}'. Available: {', '.join(data)}"
            )
        return data[field]


def _vault() -> VaultClient:
    global _vault_client_instance
    if _vault_client_instance is None:
        _vault_client_instance = VaultClient()
    return _vault_client_instance


def _read_fields(path: str, fields: Iterable[str]) -> Dict[str, str]:
    result = {}
    for field in fields:
        cache_key = f"{_SECRET_PREFIX}/{path}/{field}"
        if cache_key not in _secret_cache:
            _secret_cache[cache_key] = _vault().get_secret(path, field)
        result[field] = _secret_cache[cache_key]
    return result


def get_database_url() -> str:
    return _read_fields("database", ["url"])["url"]


def get_valkey_url() -> str:
    return _read_fields("valkey", ["url"])["url"]


def get_email_config() -> Dict[str, str]:
    """
    Email API settings.

    Returns:
        Dict with keys: api_url, api_key, sender_domain
    """
    return _read_fields("email", ["api_url", "api_key", "sender_domain"])
