"""
Script: apim_eks/setup_config.py
What: Interactive first-time setup of `config.env`.
Doing: Copies `config.example.env`, asks for the site-specific values, and swaps them in for the placeholders.
Goal: Get a new operator from clone to `pipeline-run` without hand-editing the template.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable

from apim_eks.common import ApimEksError

EXAMPLE_FILE = Path("config.example.env")
CONFIG_FILE = Path("config.env")
DEFAULT_REGION = "us-west-2"

# (section, prompt, placeholder in config.example.env, default answer)
QUESTIONS = (
    ("Azure APIM Configuration", "APIM Resource Group", "your-apim-resource-group", ""),
    ("Azure APIM Configuration", "APIM Service Name", "your-apim-service-name", ""),
    ("Azure APIM Configuration", "Azure Subscription ID", "your-subscription-id", ""),
    ("AWS EKS Configuration", "EKS Cluster Name", "your-eks-cluster-name", ""),
    ("AWS EKS Configuration", f"EKS Region (default: {DEFAULT_REGION})", DEFAULT_REGION, DEFAULT_REGION),
    ("AWS EKS Configuration", "AWS Account ID", "your-aws-account-id", ""),
    ("Container Registry", "Container Registry (e.g., myregistry.azurecr.io)", "your-registry.azurecr.io", ""),
)

NEXT_STEPS = """Next steps:
1. Review and edit config.env if needed
2. Authenticate with Azure: az login
3. Configure AWS credentials: aws configure
4. Run the pipeline: apim-eks pipeline-run
"""


def apply_answers(template: str, answers: dict[str, str]) -> str:
    """Replace each placeholder with its answer; blank answers keep the placeholder."""
    text = template
    for placeholder, answer in answers.items():
        if answer:
            text = text.replace(placeholder, answer)
    return text


def collect_answers(ask: Callable[[str], str]) -> dict[str, str]:
    answers: dict[str, str] = {}
    current_section = ""
    for section, prompt, placeholder, default in QUESTIONS:
        if section != current_section:
            print(f"\n[{section}]")
            current_section = section
        answers[placeholder] = ask(f"{prompt}: ").strip() or default
    return answers


def run_setup(
    directory: Path,
    ask: Callable[[str], str] = input,
) -> Path | None:
    """
    Write `config.env` under `directory`.

    Returns the written path, or None when the user declined to overwrite.
    """
    example = directory / EXAMPLE_FILE
    target = directory / CONFIG_FILE
    if not example.is_file():
        raise ApimEksError(f"{EXAMPLE_FILE} not found in {directory}")

    if target.exists():
        print("Warning: config.env already exists!")
        if ask("Do you want to overwrite it? (yes/no): ").strip() != "yes":
            print("Setup cancelled.")
            return None

    shutil.copyfile(example, target)
    print(f"Configuration file created: {target}")
    print("Let's configure your environment...")

    answers = collect_answers(ask)
    target.write_text(apply_answers(target.read_text(encoding="utf-8"), answers), encoding="utf-8")
    target.chmod(0o600)
    return target


def main() -> None:
    print("=== APIM to EKS Integration Setup ===")
    if run_setup(Path.cwd()) is None:
        return
    print("\nSetup completed successfully!\n")
    print(NEXT_STEPS)


if __name__ == "__main__":
    main()
