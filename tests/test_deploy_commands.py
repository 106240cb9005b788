"""
Script: tests/test_deploy_commands.py
What: Tests the deploy, rollback, and delete command flows.
Doing: Mocks cluster access and kubectl, then checks call order and error handling.
Goal: Keep rollout behavior stable: gated rollback, best-effort service account, fatal apply errors.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from apim_eks import deploy_delete, deploy_rollback, deploy_workload
from apim_eks.common import ApimEksError

BASE_ENV = {
    "EKS_CLUSTER_NAME": "prod",
    "EKS_REGION": "us-west-2",
    "EKS_NAMESPACE": "apim",
    "DEPLOYMENT_NAME": "apim-connector",
    "CONTAINER_REGISTRY": "reg.azurecr.io",
    "IMAGE_NAME": "apim-connector",
    "IMAGE_TAG": "1.0.0",
    "TOKEN_SECRET_NAME": "apim-token",
    "APIM_SERVICE_NAME": "contoso-apim",
    "AWS_ACCOUNT_ID": "123456789012",
}


class DeployRollbackTests(unittest.TestCase):
    def test_rollback_refused_when_disabled(self) -> None:
        with mock.patch.dict(os.environ, BASE_ENV, clear=True):
            with mock.patch.object(deploy_rollback.cluster_access, "connect") as connect:
                with self.assertRaisesRegex(ApimEksError, "disabled"):
                    deploy_rollback.main()
        connect.assert_not_called()

    def test_rollback_runs_undo(self) -> None:
        env = dict(BASE_ENV, ENABLE_ROLLBACK="true")
        with mock.patch.dict(os.environ, env, clear=True):
            with mock.patch.object(deploy_rollback.cluster_access, "connect"), mock.patch.object(
                deploy_rollback.kubectl, "rollout_undo"
            ) as undo:
                deploy_rollback.main()
        undo.assert_called_once_with("apim-connector", "apim")


class DeployWorkloadTests(unittest.TestCase):
    def test_deploy_applies_then_waits_then_checks(self) -> None:
        calls: list[str] = []
        with tempfile.TemporaryDirectory() as tmp:
            env = dict(BASE_ENV, MANIFEST_DIR=tmp, ENDPOINT_FILE=os.path.join(tmp, "endpoint.txt"))
            with mock.patch.dict(os.environ, env, clear=True), mock.patch.object(
                deploy_workload.cluster_access, "connect"
            ), mock.patch.object(deploy_workload.kubectl, "ensure_namespace"), mock.patch.object(
                deploy_workload.kubectl, "apply_manifest", side_effect=lambda p: calls.append(f"apply {p.name}")
            ), mock.patch.object(
                deploy_workload.kubectl, "rollout_status", side_effect=lambda *a: calls.append(f"rollout {a[2]}")
            ), mock.patch.object(
                deploy_workload, "fetch_service_endpoint", side_effect=lambda *a: calls.append("endpoint")
            ), mock.patch.object(
                deploy_workload, "check_health", side_effect=lambda *a: calls.append("health")
            ):
                deploy_workload.main()

        self.assertEqual(
            calls,
            [
                "apply service-account.yaml",
                "apply apim-eks-deployment.yaml",
                "rollout 300s",
                "endpoint",
                "health",
            ],
        )

    def test_service_account_failure_is_only_a_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, BASE_ENV, clear=True), mock.patch.object(
                deploy_workload.kubectl, "apply_manifest", side_effect=ApimEksError("exists")
            ), mock.patch.object(deploy_workload.logger, "warning") as warning:
                deploy_workload.apply_service_account("apim", Path(tmp))
        warning.assert_called_once()

    def test_apply_failure_stops_deploy(self) -> None:
        def fake_apply(path) -> None:
            if path.name == "apim-eks-deployment.yaml":
                raise ApimEksError("invalid")

        with tempfile.TemporaryDirectory() as tmp:
            env = dict(BASE_ENV, MANIFEST_DIR=tmp)
            with mock.patch.dict(os.environ, env, clear=True), mock.patch.object(
                deploy_workload.cluster_access, "connect"
            ), mock.patch.object(deploy_workload.kubectl, "ensure_namespace"), mock.patch.object(
                deploy_workload.kubectl, "apply_manifest", side_effect=fake_apply
            ), mock.patch.object(deploy_workload.kubectl, "rollout_status") as rollout:
                with self.assertRaisesRegex(ApimEksError, "Failed to apply deployment"):
                    deploy_workload.main()
        rollout.assert_not_called()


class DeployDeleteTests(unittest.TestCase):
    def test_delete_uses_rendered_manifest(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env = dict(BASE_ENV, MANIFEST_DIR=tmp)
            with mock.patch.dict(os.environ, env, clear=True), mock.patch.object(
                deploy_delete.cluster_access, "connect"
            ), mock.patch.object(deploy_delete.kubectl, "delete_manifest") as delete:
                deploy_delete.main()
        self.assertEqual(delete.call_args[0][0].name, "apim-eks-deployment.yaml")


if __name__ == "__main__":
    unittest.main()
