"""
Script: apim_eks/pipeline_cleanup.py
What: Deletes everything the pipeline deployed, after confirmation.
Doing: Asks for `yes` (or reads `CLEANUP_CONFIRM=yes`), then runs the deploy-delete flow.
Goal: Avoid accidental teardown from a mistyped command.
"""

from __future__ import annotations

import logging
from typing import Callable

from apim_eks import deploy_delete
from apim_eks.common import optional_env

logger = logging.getLogger(__name__)

PROMPT = "Are you sure you want to delete all resources? (yes/no): "


def confirmed(ask: Callable[[str], str] = input) -> bool:
    preset = optional_env("CLEANUP_CONFIRM")
    answer = preset if preset else ask(PROMPT)
    return answer.strip() == "yes"


def main() -> None:
    logger.info("=== Cleaning up resources ===")
    if not confirmed():
        logger.info("Cleanup cancelled")
        return
    deploy_delete.main()
    logger.info("Cleanup completed")


if __name__ == "__main__":
    main()
