"""
Script: apim_eks/deploy_health.py
What: Health checks for the deployed connector.
Doing: Compares ready vs desired replicas and polls the LoadBalancer for its hostname.
Goal: Tell the pipeline whether the rollout actually produced a serving workload.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from apim_eks import cluster_access, kubectl
from apim_eks.common import ApimEksError, require_env

logger = logging.getLogger(__name__)

ENDPOINT_MAX_ATTEMPTS = 30
ENDPOINT_POLL_SECONDS = 10


def replica_counts(deployment: dict | None) -> tuple[int, int]:
    """
    Return `(ready, desired)` from a Deployment object.

    `readyReplicas` is omitted by the API server while nothing is ready, so
    it defaults to 0.
    """
    if not deployment:
        return 0, 0
    ready = int((deployment.get("status") or {}).get("readyReplicas") or 0)
    desired = int((deployment.get("spec") or {}).get("replicas") or 0)
    return ready, desired


def is_healthy(ready: int, desired: int) -> bool:
    return desired > 0 and ready == desired


def check_health(deployment_name: str, namespace: str) -> None:
    logger.info("Checking deployment health...")
    ready, desired = replica_counts(kubectl.get_object("deployment", deployment_name, namespace))
    logger.info("Ready replicas: %s/%s", ready, desired)

    if not is_healthy(ready, desired):
        logger.warning("Deployment is not fully healthy")
        raise ApimEksError(f"Deployment {deployment_name} is not healthy ({ready}/{desired} ready)")
    logger.info("Deployment is healthy")


def load_balancer_hostname(service: dict | None) -> str:
    if not service:
        return ""
    ingress = ((service.get("status") or {}).get("loadBalancer") or {}).get("ingress") or []
    if not ingress:
        return ""
    return str(ingress[0].get("hostname") or "")


def wait_for_endpoint(
    lookup: Callable[[], str],
    *,
    max_attempts: int = ENDPOINT_MAX_ATTEMPTS,
    interval: float = ENDPOINT_POLL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Call `lookup` until it returns a non-empty endpoint.

    Returns empty string when every attempt came back empty.
    """
    for attempt in range(1, max_attempts + 1):
        endpoint = lookup()
        if endpoint:
            return endpoint
        logger.info("Waiting for LoadBalancer endpoint... (attempt %s/%s)", attempt, max_attempts)
        if attempt < max_attempts:
            sleep(interval)
    return ""


def fetch_service_endpoint(service_name: str, namespace: str, endpoint_file: Path) -> str:
    """Poll for the service hostname and save it to `endpoint_file`."""
    logger.info("Retrieving service endpoint...")
    endpoint = wait_for_endpoint(
        lambda: load_balancer_hostname(kubectl.get_object("service", service_name, namespace))
    )
    if not endpoint:
        logger.warning("Could not retrieve service endpoint (may still be provisioning)")
        return ""

    logger.info("Service endpoint: %s", endpoint)
    try:
        endpoint_file.parent.mkdir(parents=True, exist_ok=True)
        endpoint_file.write_text(endpoint + "\n", encoding="utf-8")
    except OSError as exc:
        raise ApimEksError(f"Failed to write service endpoint to {endpoint_file}\n{exc}") from exc
    return endpoint


def main() -> None:
    cluster_access.connect()
    check_health(require_env("DEPLOYMENT_NAME"), require_env("EKS_NAMESPACE"))


if __name__ == "__main__":
    main()
