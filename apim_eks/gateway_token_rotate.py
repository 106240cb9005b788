"""
Script: apim_eks/gateway_token_rotate.py
What: Regenerates the gateway's primary key in APIM, then syncs it to the cluster.
Doing: `az apim gateway regenerate-key --key-type primary`, a short wait, then a full sync.
Goal: Scheduled rotation of the self-hosted gateway credential.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from apim_eks import azure_cli
from apim_eks.common import ApimEksError
from apim_eks.gateway_token_sync import GatewaySettings, azure_login, log_banner, settings_from_env, sync_token
from apim_eks.notifications import send_slack_notification

logger = logging.getLogger(__name__)

# APIM takes a moment before list-keys returns the regenerated value.
PROPAGATION_WAIT_SECONDS = 5


def regenerate_primary_key(settings: GatewaySettings) -> None:
    logger.info("Regenerating APIM Gateway token...")
    try:
        azure_cli.gateway_regenerate_key(
            resource_group=settings.resource_group,
            service_name=settings.service_name,
            gateway_id=settings.gateway_id,
            key_type="primary",
        )
    except ApimEksError as exc:
        logger.error("❌ Failed to regenerate token in APIM")
        send_slack_notification("error", f"Failed to regenerate token for gateway {settings.gateway_id}")
        raise ApimEksError(f"Failed to regenerate token in APIM\n{exc}") from exc
    logger.info("✅ Token regenerated in APIM")


def rotate_token(
    settings: GatewaySettings,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    log_banner("Starting token rotation...")

    azure_login()
    try:
        regenerate_primary_key(settings)
        sleep(PROPAGATION_WAIT_SECONDS)
    finally:
        azure_cli.logout()

    sync_token(settings)


def main() -> None:
    rotate_token(settings_from_env())


if __name__ == "__main__":
    main()
