# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Kubernetes detection from downward-API variables and the service account mount."""

from __future__ import annotations

import asyncio
import socket
from typing import Any, Dict

from terroir import semconv
from terroir.config import DetectionConfig
from terroir.detectors.base import BaseDetector, attributes_from_env, env, read_text
from terroir.errors import DetectionError, PlatformMismatch

NAMESPACE_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"

K8S_ENV_MAPPINGS: Dict[str, str] = {
    "K8S_POD_NAME": semconv.K8S_POD_NAME,
    "K8S_POD_UID": semconv.K8S_POD_UID,
    "K8S_NAMESPACE": semconv.K8S_NAMESPACE_NAME,
    "K8S_NODE_NAME": semconv.K8S_NODE_NAME,
    "K8S_CLUSTER_NAME": semconv.K8S_CLUSTER_NAME,
    "K8S_DEPLOYMENT_NAME": semconv.K8S_DEPLOYMENT_NAME,
    "K8S_CONTAINER_NAME": semconv.K8S_CONTAINER_NAME,
}


class KubernetesDetector(BaseDetector):
    """Detect a Kubernetes pod.

    Requires ``KUBERNETES_SERVICE_HOST``, which the kubelet injects into every
    container.  Pod name falls back to the hostname, namespace to the service
    account mount.
    """

    def __init__(self, namespace_path: str = NAMESPACE_PATH) -> None:
        self._namespace_path = namespace_path

    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        if not env("KUBERNETES_SERVICE_HOST"):
            raise PlatformMismatch("KUBERNETES_SERVICE_HOST not set")

        attrs: Dict[str, Any] = attributes_from_env(K8S_ENV_MAPPINGS)

        if semconv.K8S_POD_NAME not in attrs:
            hostname = env("HOSTNAME") or await asyncio.to_thread(socket.gethostname)
            if hostname:
                attrs[semconv.K8S_POD_NAME] = hostname

        if semconv.K8S_NAMESPACE_NAME not in attrs:
            try:
                namespace = (await read_text(self._namespace_path)).strip()
            except DetectionError:
                # Pods with automountServiceAccountToken: false have no mount.
                namespace = ""
            if namespace:
                attrs[semconv.K8S_NAMESPACE_NAME] = namespace

        return attrs
