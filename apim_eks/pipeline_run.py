"""
Script: apim_eks/pipeline_run.py
What: Runs the complete APIM-to-EKS pipeline.
Doing: Tools, config, auth, image, token, deploy, verify, in that order, stopping at the first failure.
Goal: One command from a configured runner to a deployed, verified connector.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from apim_eks import (
    deploy_health,
    deploy_workload,
    pipeline_authenticate,
    pipeline_build_and_push_image,
    pipeline_check_tools,
    pipeline_validate_config,
    token_create,
    token_verify,
)

logger = logging.getLogger(__name__)

Step = tuple[str, Callable[[], None]]


def verify_deployment() -> None:
    deploy_health.main()
    token_verify.main()
    logger.info("Deployment verification completed")


def pipeline_steps() -> list[Step]:
    return [
        ("Checking required tools", pipeline_check_tools.main),
        ("Validating configuration", pipeline_validate_config.main),
        ("Authenticating with cloud providers", pipeline_authenticate.main),
        ("Building and pushing container image", pipeline_build_and_push_image.main),
        ("Managing authentication tokens", token_create.main),
        ("Deploying to EKS", deploy_workload.main),
        ("Verifying deployment", verify_deployment),
    ]


def run_pipeline(steps: Sequence[Step]) -> None:
    """Run steps in order; any `ApimEksError` stops the pipeline."""
    logger.info("=== Starting APIM to EKS Integration Pipeline ===")
    total = len(steps)
    for index, (title, step) in enumerate(steps, start=1):
        logger.info("[STEP] %s/%s: %s...", index, total, title)
        step()
    logger.info("=== Pipeline completed successfully ===")
    logger.info("Your APIM to EKS integration is now deployed and ready to use")


def main() -> None:
    run_pipeline(pipeline_steps())


if __name__ == "__main__":
    main()
