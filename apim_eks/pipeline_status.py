"""
Script: apim_eks/pipeline_status.py
What: Shows the current state of the deployed connector.
Doing: `kubectl get` for the Deployment, its Service, and the connector pods.
Goal: Quick look without changing anything; missing pieces are warnings.
"""

from __future__ import annotations

import logging

from apim_eks import kubectl
from apim_eks.common import ApimEksError, require_env
from apim_eks.deploy_manifest import APP_LABEL

logger = logging.getLogger(__name__)


def show(kind: str, namespace: str, *, name: str = "", selector: str = "", missing: str) -> bool:
    try:
        output = kubectl.describe_table(kind, namespace, name=name, selector=selector)
    except ApimEksError:
        logger.warning(missing)
        return False
    print(output)
    return True


def main() -> None:
    logger.info("=== Pipeline Status ===")
    deployment_name = require_env("DEPLOYMENT_NAME")
    namespace = require_env("EKS_NAMESPACE")

    logger.info("Checking EKS deployment...")
    show("deployment", namespace, name=deployment_name, missing="Deployment not found")

    logger.info("Checking service...")
    show("service", namespace, name=f"{deployment_name}-service", missing="Service not found")

    logger.info("Checking pods...")
    show("pods", namespace, selector=f"app={APP_LABEL}", missing="No pods found")


if __name__ == "__main__":
    main()
