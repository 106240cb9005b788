"""
Script: apim_eks/token_create.py
What: Issues a fresh connector token and syncs it across all stores.
Doing: Generates one token and hands it to `distribute_token`.
Goal: First-time setup of the token the deployed connector reads.
"""

from __future__ import annotations

import logging

from apim_eks.common import env_int
from apim_eks.token_stores import DEFAULT_TOKEN_LENGTH, distribute_token, generate_token, locations_from_env

logger = logging.getLogger(__name__)


def main() -> None:
    logger.info("=== APIM to EKS Token Management ===")
    logger.info("Creating new token and syncing across services...")
    locations = locations_from_env()
    token = generate_token(env_int("TOKEN_LENGTH", DEFAULT_TOKEN_LENGTH))
    distribute_token(token, locations)
    logger.info("Token creation and synchronization completed")


if __name__ == "__main__":
    main()
