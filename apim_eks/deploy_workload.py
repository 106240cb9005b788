"""
Script: apim_eks/deploy_workload.py
What: Deploys the APIM connector workload to EKS.
Doing: Updates kubeconfig, ensures the namespace, applies service account and manifest, waits for rollout, then checks health.
Goal: One command that leaves a healthy, reachable connector in the cluster.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from apim_eks import cluster_access, kubectl
from apim_eks.common import ApimEksError, optional_env, require_env
from apim_eks.deploy_health import check_health, fetch_service_endpoint
from apim_eks.deploy_manifest import (
    manifest_dir,
    settings_from_env,
    write_service_account_manifest,
    write_workload_manifest,
)

logger = logging.getLogger(__name__)


def endpoint_file() -> Path:
    default = str(Path(tempfile.gettempdir()) / "service-endpoint.txt")
    return Path(optional_env("ENDPOINT_FILE", default))


def apply_service_account(namespace: str, directory: Path) -> None:
    logger.info("Creating service account with IAM role...")
    path = write_service_account_manifest(namespace, require_env("AWS_ACCOUNT_ID"), directory)
    try:
        kubectl.apply_manifest(path)
    except ApimEksError as exc:
        logger.warning("Failed to create service account (may already exist): %s", exc)
        return
    logger.info("Service account created successfully")


def main() -> None:
    logger.info("=== APIM to EKS Deployment ===")
    cluster_access.connect()

    settings = settings_from_env()
    directory = manifest_dir()

    logger.info("Ensuring namespace exists...")
    kubectl.ensure_namespace(settings.namespace)

    logger.info("Creating deployment manifest...")
    manifest_path = write_workload_manifest(settings, directory)
    logger.info("Deployment manifest created: %s", manifest_path)

    apply_service_account(settings.namespace, directory)

    logger.info("Applying deployment to EKS...")
    try:
        kubectl.apply_manifest(manifest_path)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to apply deployment\n{exc}") from exc
    logger.info("Deployment applied successfully")

    logger.info("Waiting for deployment to be ready...")
    try:
        kubectl.rollout_status(
            settings.deployment_name,
            settings.namespace,
            optional_env("ROLLOUT_TIMEOUT", "300s"),
        )
    except ApimEksError as exc:
        raise ApimEksError(f"Deployment failed to become ready\n{exc}") from exc
    logger.info("Deployment is ready")

    fetch_service_endpoint(settings.service_name, settings.namespace, endpoint_file())
    check_health(settings.deployment_name, settings.namespace)
    logger.info("Deployment completed successfully")


if __name__ == "__main__":
    main()
