"""
Script: apim_eks/token_stores.py
What: Generates the connector token and writes it to every place that holds it.
Doing: `openssl rand` for the value, then Key Vault, Secrets Manager, the cluster secret, and the APIM header setting.
Why: `token-create` and `token-rotate` must write one identical value everywhere.
Goal: Keep the connector, APIM, and both secret stores agreeing on a single token.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from apim_eks import aws_cli, azure_cli, cluster_access, kubectl
from apim_eks.common import (
    ApimEksError,
    env_int,
    expiry_timestamp,
    optional_env,
    require_env,
    run_cmd,
    token_preview,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LENGTH = 64
# Base64 padding and the two characters that are awkward in headers and URLs.
STRIP_CHARS_RE = re.compile(r"[=+/\s]")


def clean_token(raw: str, length: int) -> str:
    """Drop `=+/` and line breaks from base64 output, then cut to `length`."""
    token = STRIP_CHARS_RE.sub("", raw)[:length]
    if len(token) < length:
        raise ApimEksError(f"Generated token too short: wanted {length} characters, got {len(token)}")
    return token


def generate_token(length: int = DEFAULT_TOKEN_LENGTH) -> str:
    """Generate a random alphanumeric token of exactly `length` characters."""
    raw = run_cmd(["openssl", "rand", "-base64", str(length)])
    return clean_token(raw, length)


@dataclass(frozen=True)
class TokenLocations:
    """Where the connector token lives, derived from `TOKEN_SECRET_NAME`."""

    base_name: str
    apim_service_name: str
    region: str
    namespace: str

    @property
    def vault_name(self) -> str:
        return f"{self.apim_service_name}-kv"

    @property
    def keyvault_secret(self) -> str:
        return f"{self.base_name}-apim"

    @property
    def aws_secret(self) -> str:
        return f"{self.base_name}-eks"

    @property
    def k8s_secret(self) -> str:
        return self.base_name


def locations_from_env() -> TokenLocations:
    return TokenLocations(
        base_name=require_env("TOKEN_SECRET_NAME"),
        apim_service_name=require_env("APIM_SERVICE_NAME"),
        region=require_env("EKS_REGION"),
        namespace=require_env("EKS_NAMESPACE"),
    )


def store_in_keyvault(token: str, locations: TokenLocations) -> None:
    logger.info("Creating token in Azure Key Vault for APIM...")
    expires = expiry_timestamp(env_int("TOKEN_EXPIRY_DAYS", 90))
    try:
        azure_cli.keyvault_set_secret(
            vault_name=locations.vault_name,
            secret_name=locations.keyvault_secret,
            value=token,
            expires=expires,
        )
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to create token in Azure Key Vault\n{exc}") from exc
    logger.info("Token created successfully in Azure Key Vault")


def store_in_secrets_manager(token: str, locations: TokenLocations) -> None:
    logger.info("Creating token in AWS Secrets Manager for EKS...")
    try:
        aws_cli.upsert_secret(name=locations.aws_secret, value=token, region=locations.region)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to create token in AWS Secrets Manager\n{exc}") from exc
    logger.info("Token created/updated successfully in AWS Secrets Manager")


def sync_to_kubernetes(token: str, locations: TokenLocations) -> None:
    """Replace the cluster secret read by the connector Deployment (key `token`)."""
    logger.info("Syncing token to Kubernetes secret...")
    cluster_access.connect(verify_tools=False)

    name, namespace = locations.k8s_secret, locations.namespace
    try:
        if kubectl.secret_exists(name, namespace):
            kubectl.delete_secret(name, namespace)
        kubectl.create_generic_secret(name, namespace, {"token": token})
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to sync token to Kubernetes\n{exc}") from exc
    logger.info("Token synced successfully to Kubernetes")


def configure_apim_subscription() -> None:
    """Best effort: a failure here usually means the API needs manual setup."""
    logger.info("Configuring APIM subscription with token...")
    api_id = optional_env("APIM_API_ID")
    subscription_id = optional_env("APIM_SUBSCRIPTION_ID")
    if not api_id or not subscription_id:
        logger.warning("APIM_API_ID or APIM_SUBSCRIPTION_ID not set, skipping APIM subscription setup")
        return

    try:
        azure_cli.configure_subscription_header(
            resource_group=require_env("APIM_RESOURCE_GROUP"),
            service_name=require_env("APIM_SERVICE_NAME"),
            api_id=api_id,
            subscription_id=subscription_id,
        )
    except ApimEksError as exc:
        logger.warning("Failed to configure APIM subscription (may require manual setup): %s", exc)
        return
    logger.info("APIM subscription configured successfully")


def distribute_token(token: str, locations: TokenLocations) -> None:
    """Write one token to Key Vault, Secrets Manager, and the cluster."""
    logger.debug("Token length: %s characters", len(token))
    logger.debug("Token preview: %s", token_preview(token))
    store_in_keyvault(token, locations)
    store_in_secrets_manager(token, locations)
    sync_to_kubernetes(token, locations)
    configure_apim_subscription()


def read_external_tokens(locations: TokenLocations) -> tuple[str, str]:
    """Return `(key_vault_value, secrets_manager_value)`; empty when unreadable."""
    apim_token = azure_cli.keyvault_get_secret(
        vault_name=locations.vault_name,
        secret_name=locations.keyvault_secret,
    )
    eks_token = aws_cli.get_secret_value(secret_id=locations.aws_secret, region=locations.region)
    return apim_token, eks_token


def tokens_synchronized(apim_token: str, eks_token: str) -> bool:
    # Two unreadable stores are not "in sync".
    return bool(apim_token) and apim_token == eks_token
