"""
Script: apim_eks/gateway_token_sync.py
What: Mirrors the APIM self-hosted gateway token into the EKS cluster.
Doing: Azure login, `list-keys`, kubeconfig, cluster secret upsert, optional Secrets Manager and Key Vault copies, backup, optional pod restart, verify.
Why: The gateway pods authenticate to APIM with this token and only read it from a Kubernetes secret.
Goal: Keep the cluster secret equal to the gateway's current primary key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from apim_eks import aws_cli, azure_cli, cluster_access, kubectl
from apim_eks.common import (
    ApimEksError,
    env_flag,
    env_int,
    expiry_timestamp,
    optional_env,
    require_env,
    token_preview,
)
from apim_eks.gateway_token_backup import DEFAULT_BACKUP_DIR, DEFAULT_MAX_BACKUPS, create_backup
from apim_eks.notifications import send_slack_notification

logger = logging.getLogger(__name__)

TOKEN_KEY = "access-token"
MIN_TOKEN_LENGTH = 20
MANAGED_BY = "apim-token-sync"
BANNER = "=" * 42


@dataclass(frozen=True)
class GatewaySettings:
    gateway_id: str
    resource_group: str
    service_name: str
    cluster_name: str
    region: str
    namespace: str
    k8s_secret_name: str

    @property
    def labels(self) -> dict[str, str]:
        return {"app": "apim-gateway", "gateway-id": self.gateway_id, "managed-by": MANAGED_BY}

    @property
    def tags(self) -> dict[str, str]:
        return {"gateway-id": self.gateway_id, "managed-by": MANAGED_BY}

    @property
    def backup_details(self) -> dict[str, str]:
        return {
            "Gateway ID": self.gateway_id,
            "APIM Service": self.service_name,
            "Resource Group": self.resource_group,
            "EKS Cluster": self.cluster_name,
        }


def settings_from_env() -> GatewaySettings:
    return GatewaySettings(
        gateway_id=require_env("GATEWAY_ID"),
        resource_group=require_env("APIM_RESOURCE_GROUP"),
        service_name=require_env("APIM_SERVICE_NAME"),
        cluster_name=require_env("EKS_CLUSTER_NAME"),
        region=require_env("EKS_REGION"),
        namespace=require_env("EKS_NAMESPACE"),
        k8s_secret_name=require_env("K8S_SECRET_NAME"),
    )


def azure_login() -> None:
    logger.info("Authenticating with Azure...")
    try:
        azure_cli.login(
            client_id=optional_env("AZURE_CLIENT_ID"),
            client_secret=optional_env("AZURE_CLIENT_SECRET"),
            tenant_id=optional_env("AZURE_TENANT_ID"),
        )
    except ApimEksError:
        logger.error("❌ Azure authentication failed")
        send_slack_notification("error", "Azure authentication failed")
        raise
    logger.info("✅ Azure authentication successful")


def fetch_gateway_token(settings: GatewaySettings) -> str:
    logger.info("Fetching token from APIM Gateway...")
    try:
        token = azure_cli.gateway_list_key(
            resource_group=settings.resource_group,
            service_name=settings.service_name,
            gateway_id=settings.gateway_id,
        )
    except ApimEksError as exc:
        logger.error("❌ Failed to retrieve token from APIM")
        send_slack_notification("error", f"Failed to retrieve token from APIM: {exc}")
        raise
    logger.info("✅ Token retrieved successfully from APIM")
    logger.debug("Token length: %s characters", len(token))
    logger.debug("Token preview: %s", token_preview(token))
    return token


def fetch_secondary_token(settings: GatewaySettings) -> str:
    """Secondary key, or empty string when APIM has none."""
    logger.info("Fetching secondary token from APIM Gateway...")
    try:
        token = azure_cli.gateway_list_key(
            resource_group=settings.resource_group,
            service_name=settings.service_name,
            gateway_id=settings.gateway_id,
            key="secondaryKey",
        )
    except ApimEksError:
        logger.warning("⚠️  Secondary token not available")
        return ""
    logger.info("✅ Secondary token retrieved successfully")
    return token


def connect_cluster(settings: GatewaySettings) -> None:
    try:
        cluster_access.connect(verify_tools=False, use_alias=True)
    except ApimEksError:
        send_slack_notification("error", f"Failed to update kubeconfig for cluster {settings.cluster_name}")
        raise


def upsert_k8s_secret(token: str, settings: GatewaySettings) -> str:
    """
    Create or patch the gateway secret.

    Returns `"unchanged"`, `"updated"`, or `"created"`. Labels are only
    (re)applied when the secret was written.
    """
    name, namespace = settings.k8s_secret_name, settings.namespace
    logger.info("Creating/updating Kubernetes secret...")

    kubectl.ensure_namespace(namespace)

    try:
        if kubectl.secret_exists(name, namespace):
            if kubectl.get_secret_value(name, namespace, TOKEN_KEY) == token:
                logger.info("ℹ️  Token unchanged, no update needed")
                return "unchanged"
            logger.info("Updating existing secret...")
            kubectl.patch_secret_value(name, namespace, TOKEN_KEY, token)
            outcome = "updated"
        else:
            logger.info("Creating new secret...")
            kubectl.create_generic_secret(
                name,
                namespace,
                {TOKEN_KEY: token, "gateway-id": settings.gateway_id},
            )
            outcome = "created"
    except ApimEksError:
        logger.error("❌ Failed to update Kubernetes secret")
        send_slack_notification("error", f"Failed to update Kubernetes secret {name}")
        raise

    logger.info("✅ Kubernetes secret updated successfully")
    try:
        kubectl.label_secret(name, namespace, settings.labels)
    except ApimEksError as exc:
        logger.warning("Failed to label secret %s: %s", name, exc)
    return outcome


def store_in_aws_secrets_manager(token: str, settings: GatewaySettings) -> bool:
    if not env_flag("ENABLE_AWS_SECRETS_MANAGER"):
        logger.debug("AWS Secrets Manager storage disabled")
        return False

    logger.info("Storing token in AWS Secrets Manager...")
    try:
        aws_cli.upsert_secret(
            name=optional_env("TOKEN_SECRET_NAME", "apim-gateway-token"),
            value=token,
            region=settings.region,
            description=f"APIM Gateway token for {settings.gateway_id}",
            tags={"Gateway": settings.gateway_id, "ManagedBy": MANAGED_BY},
        )
    except ApimEksError as exc:
        logger.warning("⚠️  Failed to store token in AWS Secrets Manager: %s", exc)
        return False
    logger.info("✅ Token stored in AWS Secrets Manager")
    return True


def store_in_azure_keyvault(token: str, settings: GatewaySettings) -> bool:
    vault_name = optional_env("KEYVAULT_NAME")
    if not env_flag("ENABLE_AZURE_KEYVAULT") or not vault_name:
        logger.debug("Azure Key Vault storage disabled")
        return False

    logger.info("Storing token in Azure Key Vault...")
    try:
        azure_cli.keyvault_set_secret(
            vault_name=vault_name,
            secret_name=optional_env("KEYVAULT_SECRET_NAME", "apim-gateway-token"),
            value=token,
            expires=expiry_timestamp(env_int("TOKEN_EXPIRY_DAYS", 90)),
            tags=settings.tags,
        )
    except ApimEksError as exc:
        logger.warning("⚠️  Failed to store token in Azure Key Vault: %s", exc)
        return False
    logger.info("✅ Token stored in Azure Key Vault")
    return True


def backup_token(token: str, settings: GatewaySettings) -> Path:
    try:
        return create_backup(
            token,
            settings.backup_details,
            backup_dir(),
            max_backups=env_int("MAX_BACKUPS", DEFAULT_MAX_BACKUPS),
        )
    except ApimEksError:
        logger.error("❌ Failed to create token backup")
        send_slack_notification("error", f"Failed to create token backup for gateway {settings.gateway_id}")
        raise


def restart_gateway_pods(settings: GatewaySettings) -> bool:
    if not env_flag("RESTART_PODS"):
        logger.info("ℹ️  Pod restart disabled (set RESTART_PODS=true to enable)")
        return False

    logger.info("Restarting gateway pods...")
    deployment_name = optional_env("GATEWAY_DEPLOYMENT_NAME", "apim-gateway")
    try:
        kubectl.rollout_restart(deployment_name, settings.namespace)
    except ApimEksError as exc:
        logger.warning("⚠️  Failed to restart pods: %s", exc)
        return False

    logger.info("⏳ Waiting for rollout to complete...")
    try:
        kubectl.rollout_status(deployment_name, settings.namespace, "5m")
    except ApimEksError:
        logger.warning("⚠️  Pod restart timeout")
        return False
    logger.info("✅ Pods restarted successfully")
    return True


def check_token_shape(token: str) -> None:
    if not token:
        raise ApimEksError("❌ Token not found in Kubernetes secret")
    if len(token) < MIN_TOKEN_LENGTH:
        raise ApimEksError("❌ Token appears invalid (too short)")


def verify_token_sync(settings: GatewaySettings) -> None:
    logger.info("Verifying token synchronization...")
    token = kubectl.get_secret_value(settings.k8s_secret_name, settings.namespace, TOKEN_KEY)
    check_token_shape(token)
    logger.info("✅ Token verification successful")
    logger.debug("Token length: %s characters", len(token))


def backup_dir() -> Path:
    return Path(optional_env("BACKUP_DIR", DEFAULT_BACKUP_DIR))


def log_banner(*lines: str) -> None:
    logger.info(BANNER)
    for line in lines:
        logger.info(line)
    logger.info(BANNER)


def sync_token(settings: GatewaySettings) -> None:
    log_banner(
        "Starting token synchronization...",
        f"Gateway ID: {settings.gateway_id}",
        f"APIM Service: {settings.service_name}",
        f"EKS Cluster: {settings.cluster_name}",
    )

    azure_login()
    try:
        token = fetch_gateway_token(settings)
        connect_cluster(settings)
        upsert_k8s_secret(token, settings)
        store_in_aws_secrets_manager(token, settings)
        store_in_azure_keyvault(token, settings)
        backup_token(token, settings)
        restart_gateway_pods(settings)
        verify_token_sync(settings)
    finally:
        azure_cli.logout()

    log_banner("✅ Token synchronization completed successfully")
    send_slack_notification("success", f"Token synchronized successfully for gateway {settings.gateway_id}")


def main() -> None:
    sync_token(settings_from_env())


if __name__ == "__main__":
    main()
