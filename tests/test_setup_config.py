"""
Script: tests/test_setup_config.py
What: Tests interactive `config.env` creation.
Doing: Runs setup in a temp dir with scripted answers.
Goal: Turn the template into a usable config without hand edits.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from apim_eks.common import ApimEksError
from apim_eks.setup_config import apply_answers, run_setup

TEMPLATE = """APIM_RESOURCE_GROUP=your-apim-resource-group
APIM_SERVICE_NAME=your-apim-service-name
AZURE_SUBSCRIPTION_ID=your-subscription-id
EKS_CLUSTER_NAME=your-eks-cluster-name
EKS_REGION=us-west-2
AWS_ACCOUNT_ID=your-aws-account-id
CONTAINER_REGISTRY=your-registry.azurecr.io
"""


class SetupConfigTests(unittest.TestCase):
    def test_apply_answers_keeps_placeholder_for_blank(self) -> None:
        text = apply_answers(TEMPLATE, {"your-apim-service-name": "contoso", "your-aws-account-id": ""})
        self.assertIn("APIM_SERVICE_NAME=contoso", text)
        self.assertIn("AWS_ACCOUNT_ID=your-aws-account-id", text)

    def test_run_setup_fills_template(self) -> None:
        answers = iter(["rg-apim", "contoso", "sub-1", "prod-eks", "", "123456789012", "reg.azurecr.io"])
        with tempfile.TemporaryDirectory() as tmp, mock.patch("builtins.print"):
            directory = Path(tmp)
            (directory / "config.example.env").write_text(TEMPLATE, encoding="utf-8")
            target = run_setup(directory, ask=lambda _prompt: next(answers))
            text = target.read_text(encoding="utf-8")

        self.assertIn("APIM_RESOURCE_GROUP=rg-apim", text)
        self.assertIn("EKS_CLUSTER_NAME=prod-eks", text)
        self.assertIn("EKS_REGION=us-west-2", text)
        self.assertIn("CONTAINER_REGISTRY=reg.azurecr.io", text)

    def test_declining_overwrite_keeps_existing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch("builtins.print"):
            directory = Path(tmp)
            (directory / "config.example.env").write_text(TEMPLATE, encoding="utf-8")
            (directory / "config.env").write_text("KEEP=1\n", encoding="utf-8")
            result = run_setup(directory, ask=lambda _prompt: "no")
            self.assertIsNone(result)
            self.assertEqual((directory / "config.env").read_text(encoding="utf-8"), "KEEP=1\n")

    def test_missing_template(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ApimEksError):
                run_setup(Path(tmp), ask=lambda _prompt: "")


if __name__ == "__main__":
    unittest.main()
