"""
Script: apim_eks/deploy_manifest.py
What: Renders the Kubernetes objects for the APIM connector workload.
Doing: Builds Deployment, Service, and ServiceAccount dicts and writes them as YAML.
Why: Object layout lives in Python, so values are never string-spliced into YAML.
Goal: Give deploy and delete the same manifest for the same configuration.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

import yaml

from apim_eks.common import ApimEksError, env_int, optional_env, require_env
from apim_eks.pipeline_build_and_push_image import configured_image_reference

APP_LABEL = "apim-connector"
CONTAINER_PORT = 8080
SERVICE_ACCOUNT_NAME = "apim-eks-sa"
DEPLOYMENT_MANIFEST_NAME = "apim-eks-deployment.yaml"
SERVICE_ACCOUNT_MANIFEST_NAME = "service-account.yaml"


@dataclass(frozen=True)
class WorkloadSettings:
    deployment_name: str
    namespace: str
    image_ref: str
    token_secret_name: str
    apim_service_name: str
    replicas: int = 3
    health_check_interval: int = 30

    @property
    def service_name(self) -> str:
        return f"{self.deployment_name}-service"

    @property
    def apim_service_url(self) -> str:
        return f"https://{self.apim_service_name}.azure-api.net"


def settings_from_env() -> WorkloadSettings:
    return WorkloadSettings(
        deployment_name=require_env("DEPLOYMENT_NAME"),
        namespace=require_env("EKS_NAMESPACE"),
        image_ref=configured_image_reference(),
        token_secret_name=require_env("TOKEN_SECRET_NAME"),
        apim_service_name=require_env("APIM_SERVICE_NAME"),
        replicas=env_int("REPLICAS", 3),
        health_check_interval=env_int("HEALTH_CHECK_INTERVAL", 30),
    )


def manifest_dir() -> Path:
    return Path(optional_env("MANIFEST_DIR", tempfile.gettempdir()))


def build_deployment(settings: WorkloadSettings) -> dict:
    labels = {"app": APP_LABEL}
    container = {
        "name": APP_LABEL,
        "image": settings.image_ref,
        "ports": [{"containerPort": CONTAINER_PORT}],
        "env": [
            {
                "name": "APIM_TOKEN",
                "valueFrom": {
                    "secretKeyRef": {"name": settings.token_secret_name, "key": "token"},
                },
            },
            {"name": "APIM_SERVICE_URL", "value": settings.apim_service_url},
        ],
        "livenessProbe": {
            "httpGet": {"path": "/health", "port": CONTAINER_PORT},
            "initialDelaySeconds": 30,
            "periodSeconds": settings.health_check_interval,
        },
        "readinessProbe": {
            "httpGet": {"path": "/ready", "port": CONTAINER_PORT},
            "initialDelaySeconds": 10,
            "periodSeconds": 5,
        },
        "resources": {
            "requests": {"memory": "128Mi", "cpu": "100m"},
            "limits": {"memory": "256Mi", "cpu": "200m"},
        },
    }
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": settings.deployment_name,
            "namespace": settings.namespace,
            "labels": dict(labels),
        },
        "spec": {
            "replicas": settings.replicas,
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {"containers": [container]},
            },
        },
    }


def build_service(settings: WorkloadSettings) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": settings.service_name, "namespace": settings.namespace},
        "spec": {
            "selector": {"app": APP_LABEL},
            "ports": [{"protocol": "TCP", "port": 80, "targetPort": CONTAINER_PORT}],
            "type": "LoadBalancer",
        },
    }


def build_service_account(namespace: str, aws_account_id: str) -> dict:
    # IRSA: pods using this account assume the IAM role below.
    role_arn = f"arn:aws:iam::{aws_account_id}:role/apim-eks-role"
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {
            "name": SERVICE_ACCOUNT_NAME,
            "namespace": namespace,
            "annotations": {"eks.amazonaws.com/role-arn": role_arn},
        },
    }


def render_documents(documents: list[dict]) -> str:
    return yaml.safe_dump_all(documents, sort_keys=False, default_flow_style=False)


def write_manifest(path: Path, documents: list[dict]) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_documents(documents), encoding="utf-8")
    except OSError as exc:
        raise ApimEksError(f"Failed to write manifest {path}\n{exc}") from exc
    return path


def write_workload_manifest(settings: WorkloadSettings, directory: Path | None = None) -> Path:
    """Write Deployment + Service to one multi-document file."""
    target = (directory or manifest_dir()) / DEPLOYMENT_MANIFEST_NAME
    return write_manifest(target, [build_deployment(settings), build_service(settings)])


def write_service_account_manifest(
    namespace: str,
    aws_account_id: str,
    directory: Path | None = None,
) -> Path:
    target = (directory or manifest_dir()) / SERVICE_ACCOUNT_MANIFEST_NAME
    return write_manifest(target, [build_service_account(namespace, aws_account_id)])
