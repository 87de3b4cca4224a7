"""
Secrets for the complaint desk, read from HashiCorp Vault.

Logs in with AppRole using VAULT_ADDR, VAULT_ROLE_ID and VAULT_SECRET_ID
(plus VAULT_NAMESPACE when set). Every secret lives under 'complaints/' in
the KV v2 engine. Missing settings or a rejected login stop startup.
"""

import os
import logging
from typing import Dict

import hvac
from hvac.exceptions import Forbidden, InvalidPath, Unauthorized

logger = logging.getLogger(__name__)

_SECRET_PREFIX = "complaints"

# Process-wide client and field cache; tests reset both
_vault_client_instance: "VaultClient | None" = None
_secret_cache: Dict[str, str] = {}


class VaultClient:
    """AppRole-authenticated reader for complaint desk secrets."""

    def __init__(self, vault_addr: str | None = None, vault_namespace: str | None = None):
        """
        Log in to Vault.

        Args:
            vault_addr: Overrides VAULT_ADDR
            vault_namespace: Overrides VAULT_NAMESPACE

        Raises:
            ValueError: VAULT_ADDR, VAULT_ROLE_ID or VAULT_SECRET_ID missing
            PermissionError: AppRole login rejected
        """
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        if not self.vault_addr:
            raise ValueError("VAULT_ADDR environment variable is required")

        role_id = os.getenv("VAULT_ROLE_ID")
        secret_id = os.getenv("VAULT_SECRET_ID")
        if not (role_id and secret_id):
            raise ValueError("VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required")

        namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        self.client = hvac.Client(url=self.vault_addr, **({"namespace": namespace} if namespace else {}))

        self._login(role_id, secret_id)
        logger.info(f"Vault login ok: {self.vault_addr}")

    def _login(self, role_id: str, secret_id: str) -> None:
        try:
            auth = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
            self.client.token = auth["auth"]["client_token"]
        except Exception as e:
            logger.error(f"Vault AppRole login failed: {e}")
            raise PermissionError(f"AppRole authentication failed: {e}")

        if not self.client.is_authenticated():
            raise PermissionError("Vault authentication failed: token not accepted")

    def get_secret(self, path: str, field: str) -> str:
        """
        One field of the secret at complaints/<path>.

        Raises:
            PermissionError: Path missing or not readable with this role
            KeyError: Secret has no such field
        """
        full_path = f"{_SECRET_PREFIX}/{path}"

        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath:
            logger.error(f"No secret at {full_path}")
            raise PermissionError(f"Secret path '{full_path}' not found in Vault")
        except (Unauthorized, Forbidden) as e:
            logger.error(f"Vault refused {full_path}: {e}")
            raise PermissionError(f"Access denied to secret '{full_path}': {e}")

        data = response["data"]["data"]
        try:
            return data[field]
        except KeyError:
            raise KeyError(
                f"Field '{field}' not found in secret '{full_path}' "
                f"(has: {', '.join(sorted(data))})"
            ) from None


def _cached_secret(path: str, field: str) -> str:
    global _vault_client_instance

    key = f"{path}/{field}"
    if key not in _secret_cache:
        if _vault_client_instance is None:
            _vault_client_instance = VaultClient()
        _secret_cache[key] = _vault_client_instance.get_secret(path, field)
    return _secret_cache[key]


def get_database_url() -> str:
    """PostgreSQL URL from complaints/database."""
    return _cached_secret("database", "url")


def get_email_config() -> Dict[str, str]:
    """
    Email gateway settings from complaints/email.

    Returns:
        Keyword arguments for EmailGatewayClient: gateway_url, api_key, hmac_secret
    """
    return {
        field: _cached_secret("email", field)
        for field in ("gateway_url", "api_key", "hmac_secret")
    }
