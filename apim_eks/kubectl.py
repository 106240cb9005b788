"""
Script: apim_eks/kubectl.py
What: Thin wrappers around the `kubectl` calls used by deploy and token flows.
Doing: Namespaces, generic secrets, manifests, rollouts, and JSON reads of live objects.
Goal: Keep kubectl flag spelling and base64 handling in one module.
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Mapping

from apim_eks.common import ApimEksError, command_succeeds, run_cmd, run_json_cmd

logger = logging.getLogger(__name__)


def namespace_exists(namespace: str) -> bool:
    return command_succeeds(["kubectl", "get", "namespace", namespace])


def ensure_namespace(namespace: str) -> bool:
    """Create the namespace if missing. Returns True when it was created."""
    if namespace_exists(namespace):
        logger.info("Namespace '%s' already exists", namespace)
        return False
    run_cmd(["kubectl", "create", "namespace", namespace])
    logger.info("Namespace '%s' created", namespace)
    return True


def get_object(kind: str, name: str, namespace: str) -> dict | None:
    """Return the live object as a dict, or None when it cannot be read."""
    try:
        return run_json_cmd(["kubectl", "get", kind, name, "-n", namespace, "-o", "json"])
    except ApimEksError as exc:
        logger.debug("kubectl get %s/%s failed: %s", kind, name, exc)
        return None


def secret_exists(name: str, namespace: str) -> bool:
    return command_succeeds(["kubectl", "get", "secret", name, "-n", namespace])


def decode_secret_value(secret: Mapping | None, key: str) -> str:
    """Decode one base64 `data` entry from a secret object; empty if absent."""
    if not secret:
        return ""
    encoded = (secret.get("data") or {}).get(key) or ""
    if not encoded:
        return ""
    try:
        return base64.b64decode(encoded).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return ""


def get_secret_value(name: str, namespace: str, key: str) -> str:
    """Read and decode one key of a secret; empty string when unavailable."""
    return decode_secret_value(get_object("secret", name, namespace), key)


def create_generic_secret(name: str, namespace: str, literals: Mapping[str, str]) -> None:
    command = ["kubectl", "create", "secret", "generic", name]
    for key, value in literals.items():
        command.append(f"--from-literal={key}={value}")
    command.append(f"--namespace={namespace}")
    run_cmd(command, sensitive=list(literals.values()))


def patch_secret_value(name: str, namespace: str, key: str, value: str) -> None:
    """Replace one key of an existing secret."""
    encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
    patch = json.dumps({"data": {key: encoded}})
    run_cmd(
        ["kubectl", "patch", "secret", name, "-n", namespace, "-p", patch],
        sensitive=[encoded],
    )


def delete_secret(name: str, namespace: str) -> None:
    run_cmd(["kubectl", "delete", "secret", name, "-n", namespace])


def label_secret(name: str, namespace: str, labels: Mapping[str, str]) -> None:
    command = ["kubectl", "label", "secret", name, "-n", namespace]
    command.extend(f"{key}={value}" for key, value in labels.items())
    command.append("--overwrite")
    run_cmd(command)


def apply_manifest(path: Path) -> None:
    run_cmd(["kubectl", "apply", "-f", str(path)])


def delete_manifest(path: Path) -> None:
    run_cmd(["kubectl", "delete", "-f", str(path)])


def rollout_status(deployment: str, namespace: str, timeout: str) -> None:
    """Block until the rollout finishes or `timeout` passes."""
    run_cmd(
        [
            "kubectl", "rollout", "status", f"deployment/{deployment}",
            "-n", namespace,
            f"--timeout={timeout}",
        ],
        capture_output=False,
    )


def rollout_undo(deployment: str, namespace: str) -> None:
    run_cmd(["kubectl", "rollout", "undo", f"deployment/{deployment}", "-n", namespace])


def rollout_restart(deployment: str, namespace: str) -> None:
    run_cmd(["kubectl", "rollout", "restart", f"deployment/{deployment}", "-n", namespace])


def describe_table(kind: str, namespace: str, *, name: str = "", selector: str = "") -> str:
    """
    Return `kubectl get` table output.

    An empty list for a selector prints "No resources found" on stderr with
    exit 0, so empty output is also reported as not found.
    """
    command = ["kubectl", "get", kind]
    if name:
        command.append(name)
    command.extend(["-n", namespace])
    if selector:
        command.extend(["-l", selector])
    output = run_cmd(command).strip()
    if not output:
        raise ApimEksError(f"No {kind} found in namespace {namespace}")
    return output
