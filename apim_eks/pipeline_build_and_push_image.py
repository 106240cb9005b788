"""
Script: apim_eks/pipeline_build_and_push_image.py
What: Builds the connector image and pushes it to the container registry.
Doing: Runs `docker build`, a best-effort `az acr login`, then `docker push`.
Goal: Publish `<registry>/<image>:<tag>` for the deploy step to pull.
"""

from __future__ import annotations

import logging
from pathlib import Path

from apim_eks import azure_cli
from apim_eks.common import ApimEksError, optional_env, require_env, run_cmd

logger = logging.getLogger(__name__)


def image_reference(registry: str, image_name: str, image_tag: str) -> str:
    return f"{registry}/{image_name}:{image_tag}"


def configured_image_reference() -> str:
    """Image reference built from `CONTAINER_REGISTRY`, `IMAGE_NAME`, `IMAGE_TAG`."""
    return image_reference(
        require_env("CONTAINER_REGISTRY"),
        require_env("IMAGE_NAME"),
        optional_env("IMAGE_TAG", "latest"),
    )


def build_and_push(image_ref: str, build_context: Path, registry: str) -> bool:
    """
    Build and push one image.

    Returns False (and does nothing) when the context has no Dockerfile.
    """
    if not (build_context / "Dockerfile").is_file():
        logger.warning("Dockerfile not found in %s, skipping image build", build_context)
        return False

    logger.info("Building Docker image %s...", image_ref)
    try:
        run_cmd(["docker", "build", "-t", image_ref, str(build_context)], capture_output=False)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to build Docker image\n{exc}") from exc
    logger.info("Docker image built successfully")

    logger.info("Pushing Docker image...")
    # Registries other than ACR are logged in by the runner; ignore failures here.
    if not azure_cli.acr_login(registry):
        logger.debug("az acr login failed for %s, trying push with existing credentials", registry)

    try:
        run_cmd(["docker", "push", image_ref], capture_output=False)
    except ApimEksError as exc:
        raise ApimEksError(f"Failed to push Docker image\n{exc}") from exc
    logger.info("Docker image pushed successfully")
    return True


def main() -> None:
    build_context = Path(optional_env("BUILD_CONTEXT", "."))
    if not (build_context / "Dockerfile").is_file():
        logger.warning("Dockerfile not found in %s, skipping image build", build_context)
        return
    registry = require_env("CONTAINER_REGISTRY")
    build_and_push(configured_image_reference(), build_context, registry)


if __name__ == "__main__":
    main()
