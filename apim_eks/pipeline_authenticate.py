"""
Script: apim_eks/pipeline_authenticate.py
What: Confirms the runner is logged in to both Azure and AWS.
Doing: Runs `az account show` and `aws sts get-caller-identity`.
Goal: Surface credential problems before the first real change is made.
"""

from __future__ import annotations

import logging

from apim_eks import aws_cli, azure_cli
from apim_eks.common import ApimEksError

logger = logging.getLogger(__name__)


def main() -> None:
    logger.info("Checking Azure authentication...")
    if not azure_cli.account_is_active():
        raise ApimEksError("Not authenticated with Azure. Please run: az login")
    logger.info("Azure authentication successful")

    logger.info("Checking AWS authentication...")
    if not aws_cli.caller_identity_ok():
        raise ApimEksError("Not authenticated with AWS. Please configure AWS credentials")
    logger.info("AWS authentication successful")


if __name__ == "__main__":
    main()
