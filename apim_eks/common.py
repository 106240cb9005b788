"""
Script: apim_eks/common.py
What: Shared helper functions used by all `apim_eks` modules.
Doing: Wraps config loading, env reads, command execution, and tool-presence checks.
Why: Avoids duplicated helper code.
Goal: Keep behavior consistent across all helper modules.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ApimEksError(RuntimeError):
    """Raised when a workflow helper hits a known error condition."""


DEFAULT_CONFIG_FILE = "config.env"
EXPIRY_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
REDACTED = "***"


def load_config_file(config_path: str | Path) -> Path:
    """
    Load `KEY=VALUE` lines from the config file into `os.environ`.

    Values already set in the environment are kept, so a CI job can override
    single keys without editing the file.
    """
    path = Path(config_path)
    if not path.is_file():
        raise ApimEksError(
            f"{path.name} not found. Copy config.example.env to config.env and configure it."
        )
    load_dotenv(path, override=False)
    logger.debug("Loaded configuration from %s", path)
    return path


def require_env(name: str) -> str:
    """Return a required environment variable or raise a clear error."""
    value = os.environ.get(name)
    if value is None or value == "":
        raise ApimEksError(f"Missing required environment variable: {name}")
    return value


def optional_env(name: str, default: str = "") -> str:
    """Return an environment variable with a fallback default."""
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


def env_flag(name: str, default: bool = False) -> bool:
    """True when the variable is set to `true` (any case)."""
    fallback = "true" if default else "false"
    return optional_env(name, fallback).strip().lower() == "true"


def env_int(name: str, default: int) -> int:
    """Read an integer setting, failing loudly on junk."""
    raw = optional_env(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError as exc:
        raise ApimEksError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def display_command(args: Sequence[str], sensitive: Sequence[str] = ()) -> str:
    """Render a command for logs with secret values masked."""
    hidden = {value for value in sensitive if value}
    parts = []
    for arg in args:
        for value in hidden:
            arg = arg.replace(value, REDACTED)
        parts.append(arg)
    return " ".join(parts)


def run_cmd(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    cwd: str | None = None,
    sensitive: Sequence[str] = (),
) -> str:
    """Run a command and return stdout, raising a readable error on failure."""
    shown = display_command(args, sensitive)
    logger.debug("Running: %s", shown)
    try:
        result = subprocess.run(
            list(args),
            check=True,
            text=True,
            capture_output=capture_output,
            cwd=cwd,
        )
    except FileNotFoundError as exc:
        raise ApimEksError(f"Command not found: {args[0]}") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        stdout = (exc.stdout or "").strip()
        details = stderr or stdout or str(exc)
        details = display_command([details], sensitive)
        raise ApimEksError(f"Command failed: {shown}\n{details}") from exc

    if not capture_output:
        return ""
    return result.stdout


def run_json_cmd(args: Sequence[str]) -> dict:
    """Run a command that returns JSON and parse it."""
    output = run_cmd(args)
    try:
        return json.loads(output)
    except json.JSONDecodeError as exc:
        raise ApimEksError(f"Expected JSON from command: {' '.join(args)}") from exc


def command_succeeds(args: Sequence[str], *, sensitive: Sequence[str] = ()) -> bool:
    """True when the command exits 0. Output is discarded."""
    try:
        run_cmd(args, sensitive=sensitive)
        return True
    except ApimEksError:
        return False


def missing_tools(tools: Sequence[str]) -> list[str]:
    """Return the tools from `tools` that are not on PATH, in order."""
    return [tool for tool in tools if shutil.which(tool) is None]


def check_tools(tools: Sequence[str]) -> None:
    """Fail once, naming every missing tool."""
    missing = missing_tools(tools)
    if missing:
        raise ApimEksError(f"Missing required tools: {' '.join(missing)}")


def expiry_timestamp(days: int, *, now: datetime | None = None) -> str:
    """UTC timestamp `days` from now, in the format `az keyvault` accepts."""
    current = now or datetime.now(timezone.utc)
    return (current + timedelta(days=days)).strftime(EXPIRY_FORMAT)


def token_preview(token: str, length: int = 20) -> str:
    """First characters of a token for debug logs."""
    return f"{token[:length]}..."
