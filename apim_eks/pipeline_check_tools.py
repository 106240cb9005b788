"""
Script: apim_eks/pipeline_check_tools.py
What: Confirms every CLI the pipeline shells out to is installed.
Doing: Looks up each tool on PATH and fails once with the full list of missing ones.
Goal: Stop before any cloud call when the runner image is incomplete.
"""

from __future__ import annotations

import logging

from apim_eks.common import check_tools

logger = logging.getLogger(__name__)

PIPELINE_TOOLS = ("aws", "kubectl", "az", "docker", "openssl")
DEPLOY_TOOLS = ("aws", "kubectl", "az")


def main() -> None:
    logger.info("Checking required tools...")
    check_tools(PIPELINE_TOOLS)
    logger.info("All required tools are installed")


if __name__ == "__main__":
    main()
