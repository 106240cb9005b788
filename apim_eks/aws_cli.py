"""
Script: apim_eks/aws_cli.py
What: Thin wrappers around the `aws` commands for identity, EKS kubeconfig, and Secrets Manager.
Doing: Builds argument lists and runs them via `run_cmd`.
Goal: Keep AWS flag spelling in one module.
"""

from __future__ import annotations

import logging
from typing import Mapping

from apim_eks.common import ApimEksError, command_succeeds, run_cmd

logger = logging.getLogger(__name__)


def caller_identity_ok() -> bool:
    """True when AWS credentials resolve to an identity."""
    return command_succeeds(["aws", "sts", "get-caller-identity"])


def update_kubeconfig(*, cluster_name: str, region: str, alias: str = "") -> None:
    """Point kubectl at the EKS cluster."""
    command = [
        "aws", "eks", "update-kubeconfig",
        "--name", cluster_name,
        "--region", region,
    ]
    if alias:
        command.extend(["--alias", alias])
    try:
        run_cmd(command)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to update kubeconfig for cluster {cluster_name}\n{exc}") from exc


def secret_exists(*, secret_id: str, region: str) -> bool:
    return command_succeeds(
        ["aws", "secretsmanager", "describe-secret", "--secret-id", secret_id, "--region", region]
    )


def tag_args(tags: Mapping[str, str]) -> list[str]:
    """Render shorthand `Key=...,Value=...` pairs for `--tags`."""
    return [f"Key={key},Value={value}" for key, value in tags.items()]


def upsert_secret(
    *,
    name: str,
    value: str,
    region: str,
    description: str = "",
    tags: Mapping[str, str] | None = None,
) -> str:
    """
    Create the secret or replace its value.

    Description and tags only apply when the secret is created.
    Returns `"updated"` or `"created"`.
    """
    if secret_exists(secret_id=name, region=region):
        run_cmd(
            [
                "aws", "secretsmanager", "update-secret",
                "--secret-id", name,
                "--secret-string", value,
                "--region", region,
            ],
            sensitive=[value],
        )
        return "updated"

    command = ["aws", "secretsmanager", "create-secret", "--name", name]
    if description:
        command.extend(["--description", description])
    command.extend(["--secret-string", value, "--region", region])
    if tags:
        command.append("--tags")
        command.extend(tag_args(tags))
    run_cmd(command, sensitive=[value])
    return "created"


def get_secret_value(*, secret_id: str, region: str) -> str:
    """Return the secret string, or empty string when it cannot be read."""
    command = [
        "aws", "secretsmanager", "get-secret-value",
        "--secret-id", secret_id,
        "--region", region,
        "--query", "SecretString",
        "--output", "text",
    ]
    try:
        return run_cmd(command).strip()
    except ApimEksError as exc:
        logger.debug("Secrets Manager read failed: %s", exc)
        return ""
