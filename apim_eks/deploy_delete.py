"""
Script: apim_eks/deploy_delete.py
What: Removes the connector Deployment and Service from EKS.
Doing: Re-renders the manifest from current config and runs `kubectl delete -f` on it.
Goal: Clean teardown that targets exactly what `deploy` created.
"""

from __future__ import annotations

import logging

from apim_eks import cluster_access, kubectl
from apim_eks.common import ApimEksError
from apim_eks.deploy_manifest import settings_from_env, write_workload_manifest

logger = logging.getLogger(__name__)


def main() -> None:
    cluster_access.connect()

    logger.info("Deleting deployment...")
    manifest_path = write_workload_manifest(settings_from_env())
    try:
        kubectl.delete_manifest(manifest_path)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to delete deployment\n{exc}") from exc
    logger.info("Deployment deleted successfully")


if __name__ == "__main__":
    main()
