"""
Script: apim_eks/gateway_token_status.py
What: Prints where the gateway token currently stands.
Doing: Reports gateway registration, secondary key availability, the cluster secret's presence and length, and the newest backup.
Goal: Read-only overview for on-call; it never changes anything.
"""

from __future__ import annotations

import logging

from apim_eks import azure_cli, kubectl
from apim_eks.gateway_token_backup import latest_backup
from apim_eks.gateway_token_sync import (
    BANNER,
    TOKEN_KEY,
    GatewaySettings,
    azure_login,
    backup_dir,
    connect_cluster,
    fetch_secondary_token,
    settings_from_env,
)
from apim_eks.gateway_token_verify import gateway_registered

logger = logging.getLogger(__name__)


def report_status(settings: GatewaySettings) -> None:
    logger.info("Gateway ID: %s", settings.gateway_id)
    logger.info("APIM Service: %s", settings.service_name)
    logger.info("EKS Cluster: %s", settings.cluster_name)

    gateway_registered(settings)
    if fetch_secondary_token(settings):
        logger.info("✅ Secondary key available")

    token = kubectl.get_secret_value(settings.k8s_secret_name, settings.namespace, TOKEN_KEY)
    if token:
        logger.info("✅ Token exists in Kubernetes secret")
        logger.info("   Token length: %s characters", len(token))
    else:
        logger.warning("⚠️  Token not found in Kubernetes secret")

    directory = backup_dir()
    if directory.is_dir():
        newest = latest_backup(directory)
        if newest:
            logger.info("✅ Last backup: %s", newest.name)
        else:
            logger.warning("⚠️  No backups found")


def main() -> None:
    logger.info(BANNER)
    logger.info("APIM Gateway Token Status")
    logger.info(BANNER)

    settings = settings_from_env()
    azure_login()
    try:
        connect_cluster(settings)
        report_status(settings)
    finally:
        azure_cli.logout()

    logger.info(BANNER)


if __name__ == "__main__":
    main()
