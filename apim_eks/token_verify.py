"""
Script: apim_eks/token_verify.py
What: Confirms Key Vault and Secrets Manager hold the same connector token.
Goal: Catch a half-finished create or rotate.
"""

from __future__ import annotations

import logging

from apim_eks.common import ApimEksError
from apim_eks.token_stores import locations_from_env, read_external_tokens, tokens_synchronized

logger = logging.getLogger(__name__)


def main() -> None:
    logger.info("Verifying token synchronization...")
    apim_token, eks_token = read_external_tokens(locations_from_env())
    if not tokens_synchronized(apim_token, eks_token):
        raise ApimEksError("Tokens are NOT synchronized")
    logger.info("Tokens are synchronized")


if __name__ == "__main__":
    main()
