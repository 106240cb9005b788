"""
Script: apim_eks/token_rotate.py
What: Replaces the connector token everywhere with a new value.
Doing: Generates a token that differs from the current Key Vault copy, distributes it, then re-checks both stores.
Goal: Periodic rotation that never leaves the two secret stores disagreeing.
"""

from __future__ import annotations

import logging

from apim_eks import azure_cli
from apim_eks.common import ApimEksError, env_int
from apim_eks.token_stores import (
    DEFAULT_TOKEN_LENGTH,
    TokenLocations,
    distribute_token,
    generate_token,
    locations_from_env,
    read_external_tokens,
    tokens_synchronized,
)

logger = logging.getLogger(__name__)

MAX_GENERATE_ATTEMPTS = 3


def new_token_differing_from(current: str, length: int) -> str:
    for _ in range(MAX_GENERATE_ATTEMPTS):
        token = generate_token(length)
        if token != current:
            return token
    raise ApimEksError("Could not generate a token different from the current one")


def rotate(locations: TokenLocations, length: int) -> None:
    current = azure_cli.keyvault_get_secret(
        vault_name=locations.vault_name,
        secret_name=locations.keyvault_secret,
    )
    if not current:
        logger.warning("No current token in Key Vault, rotation will create one")

    distribute_token(new_token_differing_from(current, length), locations)

    if not tokens_synchronized(*read_external_tokens(locations)):
        raise ApimEksError("Tokens are NOT synchronized after rotation")


def main() -> None:
    logger.info("Starting token rotation...")
    rotate(locations_from_env(), env_int("TOKEN_LENGTH", DEFAULT_TOKEN_LENGTH))
    logger.info("Token rotation completed successfully")


if __name__ == "__main__":
    main()
