"""
Script: apim_eks/azure_cli.py
What: Thin wrappers around the `az` commands used by the pipeline and token flows.
Doing: Builds argument lists for login, Key Vault, APIM gateway, and ACR calls and runs them via `run_cmd`.
Why: Keeps `az` flag spelling in one module so flows read as steps.
Goal: Give every flow the same Azure behavior and error messages.
"""

from __future__ import annotations

import logging
from typing import Mapping

from apim_eks.common import ApimEksError, command_succeeds, run_cmd

logger = logging.getLogger(__name__)


def account_is_active() -> bool:
    """True when `az` has a usable logged-in session."""
    return command_succeeds(["az", "account", "show"])


def login(*, client_id: str = "", client_secret: str = "", tenant_id: str = "") -> None:
    """
    Log in to Azure.

    A service principal is used when all three credentials are present.
    Otherwise try managed identity, then accept an existing CLI session.
    """
    if client_id and client_secret and tenant_id:
        run_cmd(
            [
                "az", "login", "--service-principal",
                "--username", client_id,
                "--password", client_secret,
                "--tenant", tenant_id,
            ],
            sensitive=[client_secret],
        )
        return

    if command_succeeds(["az", "login", "--identity"]):
        return
    if account_is_active():
        return
    raise ApimEksError("Azure authentication failed: no service principal, managed identity, or CLI session")


def logout() -> None:
    # Logging out of a session we never had is not an error.
    command_succeeds(["az", "logout"])


def tag_args(tags: Mapping[str, str]) -> list[str]:
    """Render `key=value` pairs for `--tags`."""
    return [f"{key}={value}" for key, value in tags.items()]


def keyvault_set_secret(
    *,
    vault_name: str,
    secret_name: str,
    value: str,
    expires: str,
    tags: Mapping[str, str] | None = None,
) -> None:
    command = [
        "az", "keyvault", "secret", "set",
        "--vault-name", vault_name,
        "--name", secret_name,
        "--value", value,
        "--expires", expires,
    ]
    if tags:
        command.append("--tags")
        command.extend(tag_args(tags))
    run_cmd(command, sensitive=[value])


def keyvault_get_secret(*, vault_name: str, secret_name: str) -> str:
    """Return the secret value, or empty string when it cannot be read."""
    command = [
        "az", "keyvault", "secret", "show",
        "--vault-name", vault_name,
        "--name", secret_name,
        "--query", "value",
        "-o", "tsv",
    ]
    try:
        return run_cmd(command).strip()
    except ApimEksError as exc:
        logger.debug("Key Vault read failed: %s", exc)
        return ""


def _gateway_args(resource_group: str, service_name: str, gateway_id: str) -> list[str]:
    return [
        "--resource-group", resource_group,
        "--service-name", service_name,
        "--gateway-id", gateway_id,
    ]


def gateway_list_key(
    *,
    resource_group: str,
    service_name: str,
    gateway_id: str,
    key: str = "primaryKey",
) -> str:
    """
    Return one gateway key (`primaryKey` or `secondaryKey`).

    `az` prints the literal `null` when the key is absent; that is treated
    as a failure, same as empty output.
    """
    command = [
        "az", "apim", "gateway", "list-keys",
        *_gateway_args(resource_group, service_name, gateway_id),
        "--query", key,
        "--output", "tsv",
    ]
    token = run_cmd(command).strip()
    if not token or token == "null":
        raise ApimEksError(f"APIM returned no {key} for gateway {gateway_id}")
    return token


def gateway_regenerate_key(
    *,
    resource_group: str,
    service_name: str,
    gateway_id: str,
    key_type: str = "primary",
) -> None:
    run_cmd(
        [
            "az", "apim", "gateway", "regenerate-key",
            *_gateway_args(resource_group, service_name, gateway_id),
            "--key-type", key_type,
        ]
    )


def gateway_exists(*, resource_group: str, service_name: str, gateway_id: str) -> bool:
    return command_succeeds(
        [
            "az", "apim", "gateway", "show",
            *_gateway_args(resource_group, service_name, gateway_id),
            "--query", "name",
            "-o", "tsv",
        ]
    )


def configure_subscription_header(
    *,
    resource_group: str,
    service_name: str,
    api_id: str,
    subscription_id: str,
    header: str = "X-API-Token",
) -> None:
    """Point the API's subscription key header at `header`."""
    run_cmd(
        [
            "az", "apim", "api", "operation", "update",
            "--resource-group", resource_group,
            "--service-name", service_name,
            "--api-id", api_id,
            "--subscription-id", subscription_id,
            "--set", f"properties.subscriptionKeyParameterNames.header={header}",
        ]
    )


def registry_short_name(registry: str) -> str:
    """
    Return the ACR name from a login server.

    Example: `myregistry.azurecr.io` becomes `myregistry`.
    """
    return registry.split(".", 1)[0]


def acr_login(registry: str) -> bool:
    """Log docker in to ACR. Returns False instead of raising."""
    return command_succeeds(["az", "acr", "login", "--name", registry_short_name(registry)])
