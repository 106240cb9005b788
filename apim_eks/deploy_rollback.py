"""
Script: apim_eks/deploy_rollback.py
What: Rolls the connector Deployment back to its previous revision.
Doing: Runs `kubectl rollout undo` after checking `ENABLE_ROLLBACK`.
Goal: Quick recovery from a bad image without redeploying by hand.
"""

from __future__ import annotations

import logging

from apim_eks import cluster_access, kubectl
from apim_eks.common import ApimEksError, env_flag, require_env

logger = logging.getLogger(__name__)


def main() -> None:
    if not env_flag("ENABLE_ROLLBACK"):
        raise ApimEksError("Rollback is disabled in configuration")

    cluster_access.connect()
    deployment_name = require_env("DEPLOYMENT_NAME")
    namespace = require_env("EKS_NAMESPACE")

    logger.info("Rolling back deployment...")
    try:
        kubectl.rollout_undo(deployment_name, namespace)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to rollback deployment\n{exc}") from exc
    logger.info("Deployment rolled back successfully")


if __name__ == "__main__":
    main()
