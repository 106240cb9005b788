"""
Script: apim_eks/gateway_token_verify.py
What: Checks the cluster holds a plausible gateway token and APIM knows the gateway.
Doing: Reads the secret's `access-token`, checks its length, then runs `az apim gateway show`.
Goal: Cheap post-deploy check that the gateway can authenticate.
"""

from __future__ import annotations

import logging

from apim_eks import azure_cli
from apim_eks.common import ApimEksError
from apim_eks.gateway_token_sync import (
    GatewaySettings,
    azure_login,
    connect_cluster,
    settings_from_env,
    verify_token_sync,
)

logger = logging.getLogger(__name__)


def gateway_registered(settings: GatewaySettings) -> bool:
    logger.info("Verifying gateway connectivity to APIM...")
    # Existence only; live connectivity depends on the gateway's network path.
    found = azure_cli.gateway_exists(
        resource_group=settings.resource_group,
        service_name=settings.service_name,
        gateway_id=settings.gateway_id,
    )
    if found:
        logger.info("✅ Gateway exists in APIM")
    else:
        logger.error("❌ Gateway not found in APIM")
    return found


def main() -> None:
    settings = settings_from_env()
    azure_login()
    try:
        connect_cluster(settings)
        verify_token_sync(settings)
        if not gateway_registered(settings):
            raise ApimEksError(f"Gateway {settings.gateway_id} not found in APIM")
    finally:
        azure_cli.logout()


if __name__ == "__main__":
    main()
