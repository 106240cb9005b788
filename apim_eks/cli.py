from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path

from apim_eks.common import DEFAULT_CONFIG_FILE, ApimEksError, env_flag, load_config_file, optional_env
from apim_eks.logging_setup import setup_logging

logger = logging.getLogger(__name__)

# Commands that run before a config file exists.
NO_CONFIG_COMMANDS = frozenset({"setup"})


def command_map() -> dict[str, Callable[[], None]]:
    """
    Map CLI command names to Python entry functions.

    Each value is a `main()` function from one workflow helper module.
    """
    from apim_eks.deploy_delete import main as deploy_delete
    from apim_eks.deploy_health import main as deploy_health
    from apim_eks.deploy_rollback import main as deploy_rollback
    from apim_eks.deploy_workload import main as deploy_workload
    from apim_eks.gateway_token_rotate import main as gateway_token_rotate
    from apim_eks.gateway_token_status import main as gateway_token_status
    from apim_eks.gateway_token_sync import main as gateway_token_sync
    from apim_eks.gateway_token_verify import main as gateway_token_verify
    from apim_eks.pipeline_authenticate import main as pipeline_authenticate
    from apim_eks.pipeline_build_and_push_image import main as pipeline_build_and_push_image
    from apim_eks.pipeline_check_tools import main as pipeline_check_tools
    from apim_eks.pipeline_cleanup import main as pipeline_cleanup
    from apim_eks.pipeline_run import main as pipeline_run
    from apim_eks.pipeline_status import main as pipeline_status
    from apim_eks.pipeline_validate_config import main as pipeline_validate_config
    from apim_eks.setup_config import main as setup_config
    from apim_eks.token_create import main as token_create
    from apim_eks.token_rotate import main as token_rotate
    from apim_eks.token_verify import main as token_verify

    return {
        "pipeline-run": pipeline_run,
        "pipeline-status": pipeline_status,
        "pipeline-cleanup": pipeline_cleanup,
        "check-tools": pipeline_check_tools,
        "validate-config": pipeline_validate_config,
        "authenticate": pipeline_authenticate,
        "build-and-push-image": pipeline_build_and_push_image,
        "deploy": deploy_workload,
        "deploy-rollback": deploy_rollback,
        "deploy-delete": deploy_delete,
        "deploy-health": deploy_health,
        "token-create": token_create,
        "token-rotate": token_rotate,
        "token-verify": token_verify,
        "gateway-token-sync": gateway_token_sync,
        "gateway-token-rotate": gateway_token_rotate,
        "gateway-token-verify": gateway_token_verify,
        "gateway-token-status": gateway_token_status,
        "setup": setup_config,
    }


def build_parser(commands: Mapping[str, Callable[[], None]]) -> argparse.ArgumentParser:
    """Build argument parser with one positional command choice."""
    parser = argparse.ArgumentParser(
        prog="apim-eks",
        description="Run one APIM-to-EKS workflow command.",
    )
    parser.add_argument("command", choices=sorted(commands.keys()))
    parser.add_argument(
        "--config",
        default=os.environ.get("APIM_EKS_CONFIG", DEFAULT_CONFIG_FILE),
        help="KEY=VALUE configuration file (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def run_command(command: str, commands: Mapping[str, Callable[[], None]]) -> None:
    """
    Run one registered command.

    `commands` is passed in to keep this function easy to test.
    """
    commands[command]()


def configure_logging(verbose: bool) -> None:
    # DEBUG and LOG_FILE may come from the config file, so this runs after loading it.
    level = logging.DEBUG if verbose or env_flag("DEBUG") else logging.INFO
    log_file = optional_env("LOG_FILE")
    setup_logging(level=level, log_file=Path(log_file) if log_file else None)


def main(argv: list[str] | None = None) -> None:
    # Build command registry once so parser and dispatcher use the same keys.
    commands = command_map()
    parser = build_parser(commands)
    args = parser.parse_args(argv)

    try:
        if args.command not in NO_CONFIG_COMMANDS:
            load_config_file(args.config)
        configure_logging(args.verbose)
        run_command(args.command, commands)
    except ApimEksError as exc:
        # Logging may not be configured yet if the config file was missing.
        if not logging.getLogger("apim_eks").handlers:
            setup_logging()
        logger.error(str(exc))
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
