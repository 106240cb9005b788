"""
Script: apim_eks/cluster_access.py
What: Prepares kubectl to talk to the configured EKS cluster.
Doing: Optionally checks the deploy tools, then runs `aws eks update-kubeconfig`.
Goal: Give every cluster-facing command the same first step.
"""

from __future__ import annotations

import logging

from apim_eks import aws_cli
from apim_eks.common import check_tools, require_env
from apim_eks.pipeline_check_tools import DEPLOY_TOOLS

logger = logging.getLogger(__name__)


def connect(*, verify_tools: bool = True, use_alias: bool = False) -> str:
    """
    Update kubeconfig for `EKS_CLUSTER_NAME` in `EKS_REGION`.

    With `use_alias` the kube context is named after the cluster instead of
    the ARN. Returns the cluster name.
    """
    if verify_tools:
        logger.info("Checking prerequisites...")
        check_tools(DEPLOY_TOOLS)
        logger.info("All prerequisites met")

    cluster_name = require_env("EKS_CLUSTER_NAME")
    region = require_env("EKS_REGION")
    logger.info("Updating kubeconfig for EKS cluster...")
    aws_cli.update_kubeconfig(
        cluster_name=cluster_name,
        region=region,
        alias=cluster_name if use_alias else "",
    )
    logger.info("Kubeconfig updated successfully")
    return cluster_name
