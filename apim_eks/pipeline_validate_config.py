"""
Script: apim_eks/pipeline_validate_config.py
What: Checks that the core configuration variables are set.
Doing: Collects every empty or missing name and reports them together.
Goal: Fail fast with one readable message instead of one error per variable.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Sequence

from apim_eks.common import ApimEksError

logger = logging.getLogger(__name__)

REQUIRED_VARS = (
    "APIM_RESOURCE_GROUP",
    "APIM_SERVICE_NAME",
    "EKS_CLUSTER_NAME",
    "EKS_REGION",
    "EKS_NAMESPACE",
    "DEPLOYMENT_NAME",
)


def find_missing_vars(environ: Mapping[str, str], names: Sequence[str] = REQUIRED_VARS) -> list[str]:
    """Return names that are unset or empty, keeping the declared order."""
    return [name for name in names if not environ.get(name)]


def validate_config(environ: Mapping[str, str] | None = None) -> None:
    missing = find_missing_vars(os.environ if environ is None else environ)
    if missing:
        raise ApimEksError(f"Missing required configuration variables: {' '.join(missing)}")


def main() -> None:
    logger.info("Validating configuration...")
    validate_config()
    logger.info("Configuration validated successfully")


if __name__ == "__main__":
    main()
