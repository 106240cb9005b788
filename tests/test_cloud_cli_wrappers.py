"""
Script: tests/test_cloud_cli_wrappers.py
What: Tests argument building in `azure_cli`, `aws_cli`, and `kubectl`.
Doing: Replaces `run_cmd` / `command_succeeds` with mocks and inspects the argv each wrapper builds.
Goal: Catch flag typos before they reach a real cloud account.
"""

from __future__ import annotations

import base64
import json
import unittest
from unittest import mock

from apim_eks import aws_cli, azure_cli, kubectl
from apim_eks.common import ApimEksError


class AzureCliTests(unittest.TestCase):
    def test_gateway_list_key_rejects_null(self) -> None:
        with mock.patch.object(azure_cli, "run_cmd", return_value="null\n"):
            with self.assertRaises(ApimEksError):
                azure_cli.gateway_list_key(resource_group="rg", service_name="svc", gateway_id="gw")

    def test_gateway_list_key_queries_requested_key(self) -> None:
        with mock.patch.object(azure_cli, "run_cmd", return_value="abc123\n") as run:
            token = azure_cli.gateway_list_key(
                resource_group="rg", service_name="svc", gateway_id="gw", key="secondaryKey"
            )
        self.assertEqual(token, "abc123")
        args = run.call_args[0][0]
        self.assertEqual(args[:4], ["az", "apim", "gateway", "list-keys"])
        self.assertEqual(args[args.index("--query") + 1], "secondaryKey")

    def test_login_uses_service_principal_when_complete(self) -> None:
        with mock.patch.object(azure_cli, "run_cmd") as run:
            azure_cli.login(client_id="id", client_secret="pw", tenant_id="tenant")
        args = run.call_args[0][0]
        self.assertIn("--service-principal", args)
        self.assertEqual(run.call_args[1]["sensitive"], ["pw"])

    def test_login_falls_back_to_existing_session(self) -> None:
        results = {("az", "login", "--identity"): False, ("az", "account", "show"): True}
        with mock.patch.object(azure_cli, "command_succeeds", side_effect=lambda a: results[tuple(a)]):
            azure_cli.login(client_id="id")

    def test_login_fails_without_any_credentials(self) -> None:
        with mock.patch.object(azure_cli, "command_succeeds", return_value=False):
            with self.assertRaises(ApimEksError):
                azure_cli.login()

    def test_keyvault_set_secret_adds_tags(self) -> None:
        with mock.patch.object(azure_cli, "run_cmd") as run:
            azure_cli.keyvault_set_secret(
                vault_name="kv",
                secret_name="tok",
                value="secret-value",
                expires="2026-01-01T00:00:00Z",
                tags={"gateway-id": "gw", "managed-by": "apim-token-sync"},
            )
        args = run.call_args[0][0]
        self.assertEqual(args[-3:], ["--tags", "gateway-id=gw", "managed-by=apim-token-sync"])
        self.assertEqual(run.call_args[1]["sensitive"], ["secret-value"])

    def test_keyvault_get_secret_returns_empty_on_failure(self) -> None:
        with mock.patch.object(azure_cli, "run_cmd", side_effect=ApimEksError("nope")):
            self.assertEqual(azure_cli.keyvault_get_secret(vault_name="kv", secret_name="s"), "")

    def test_registry_short_name(self) -> None:
        self.assertEqual(azure_cli.registry_short_name("myregistry.azurecr.io"), "myregistry")
        self.assertEqual(azure_cli.registry_short_name("localhost"), "localhost")


class AwsCliTests(unittest.TestCase):
    def test_upsert_updates_existing_secret(self) -> None:
        with mock.patch.object(aws_cli, "secret_exists", return_value=True), mock.patch.object(
            aws_cli, "run_cmd"
        ) as run:
            outcome = aws_cli.upsert_secret(name="tok", value="v", region="us-west-2", tags={"A": "b"})
        self.assertEqual(outcome, "updated")
        args = run.call_args[0][0]
        self.assertEqual(args[:3], ["aws", "secretsmanager", "update-secret"])
        self.assertNotIn("--tags", args)

    def test_upsert_creates_with_description_and_tags(self) -> None:
        with mock.patch.object(aws_cli, "secret_exists", return_value=False), mock.patch.object(
            aws_cli, "run_cmd"
        ) as run:
            outcome = aws_cli.upsert_secret(
                name="tok",
                value="v",
                region="us-west-2",
                description="APIM Gateway token for gw",
                tags={"Gateway": "gw", "ManagedBy": "apim-token-sync"},
            )
        self.assertEqual(outcome, "created")
        args = run.call_args[0][0]
        self.assertEqual(args[:3], ["aws", "secretsmanager", "create-secret"])
        self.assertEqual(args[args.index("--description") + 1], "APIM Gateway token for gw")
        self.assertEqual(args[-2:], ["Key=Gateway,Value=gw", "Key=ManagedBy,Value=apim-token-sync"])

    def test_update_kubeconfig_alias(self) -> None:
        with mock.patch.object(aws_cli, "run_cmd") as run:
            aws_cli.update_kubeconfig(cluster_name="prod", region="us-west-2", alias="prod")
        self.assertEqual(run.call_args[0][0][-2:], ["--alias", "prod"])

    def test_update_kubeconfig_failure_names_cluster(self) -> None:
        with mock.patch.object(aws_cli, "run_cmd", side_effect=ApimEksError("denied")):
            with self.assertRaisesRegex(ApimEksError, "cluster prod"):
                aws_cli.update_kubeconfig(cluster_name="prod", region="us-west-2")


class KubectlTests(unittest.TestCase):
    def test_decode_secret_value(self) -> None:
        encoded = base64.b64encode(b"gateway-token").decode("ascii")
        secret = {"data": {"access-token": encoded}}
        self.assertEqual(kubectl.decode_secret_value(secret, "access-token"), "gateway-token")
        self.assertEqual(kubectl.decode_secret_value(secret, "missing"), "")
        self.assertEqual(kubectl.decode_secret_value(None, "access-token"), "")
        self.assertEqual(kubectl.decode_secret_value({"data": {"k": "%%%"}}, "k"), "")

    def test_patch_secret_value_encodes_token(self) -> None:
        with mock.patch.object(kubectl, "run_cmd") as run:
            kubectl.patch_secret_value("gw-secret", "apim", "access-token", "tok")
        args = run.call_args[0][0]
        patch = json.loads(args[args.index("-p") + 1])
        self.assertEqual(patch, {"data": {"access-token": base64.b64encode(b"tok").decode("ascii")}})

    def test_create_generic_secret_literals(self) -> None:
        with mock.patch.object(kubectl, "run_cmd") as run:
            kubectl.create_generic_secret("gw-secret", "apim", {"access-token": "tok", "gateway-id": "gw"})
        args = run.call_args[0][0]
        self.assertIn("--from-literal=access-token=tok", args)
        self.assertIn("--from-literal=gateway-id=gw", args)
        self.assertEqual(args[-1], "--namespace=apim")

    def test_ensure_namespace_creates_when_missing(self) -> None:
        with mock.patch.object(kubectl, "namespace_exists", return_value=False), mock.patch.object(
            kubectl, "run_cmd"
        ) as run:
            self.assertTrue(kubectl.ensure_namespace("apim"))
        run.assert_called_once_with(["kubectl", "create", "namespace", "apim"])

    def test_describe_table_empty_output_is_not_found(self) -> None:
        with mock.patch.object(kubectl, "run_cmd", return_value="\n"):
            with self.assertRaises(ApimEksError):
                kubectl.describe_table("pods", "apim", selector="app=apim-connector")


if __name__ == "__main__":
    unittest.main()
