# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Semantic-convention keys and values used by the detectors.

Kept as plain string constants so detectors stay independent of the
``opentelemetry-semantic-conventions`` release cadence.
"""

from __future__ import annotations

# =========================================================================
# Attribute keys
# =========================================================================

CLOUD_PROVIDER = "cloud.provider"
CLOUD_PLATFORM = "cloud.platform"
CLOUD_REGION = "cloud.region"
CLOUD_AVAILABILITY_ZONE = "cloud.availability_zone"
CLOUD_ACCOUNT_ID = "cloud.account.id"

SERVICE_NAME = "service.name"
SERVICE_NAMESPACE = "service.namespace"
SERVICE_VERSION = "service.version"
SERVICE_INSTANCE_ID = "service.instance.id"

HOST_ID = "host.id"
HOST_NAME = "host.name"
HOST_TYPE = "host.type"
HOST_ARCH = "host.arch"
OS_TYPE = "os.type"

PROCESS_PID = "process.pid"
PROCESS_EXECUTABLE_PATH = "process.executable.path"
PROCESS_COMMAND = "process.command"
PROCESS_RUNTIME_NAME = "process.runtime.name"
PROCESS_RUNTIME_VERSION = "process.runtime.version"
PROCESS_RUNTIME_DESCRIPTION = "process.runtime.description"

CONTAINER_ID = "container.id"
CONTAINER_RUNTIME = "container.runtime"

K8S_POD_NAME = "k8s.pod.name"
K8S_POD_UID = "k8s.pod.uid"
K8S_NAMESPACE_NAME = "k8s.namespace.name"
K8S_NODE_NAME = "k8s.node.name"
K8S_CLUSTER_NAME = "k8s.cluster.name"
K8S_DEPLOYMENT_NAME = "k8s.deployment.name"
K8S_CONTAINER_NAME = "k8s.container.name"

FAAS_NAME = "faas.name"
FAAS_VERSION = "faas.version"
FAAS_INSTANCE = "faas.instance"
FAAS_MAX_MEMORY = "faas.max_memory"

AZURE_APP_SERVICE_STAMP = "azure.app.service.stamp"

# =========================================================================
# Well-known values
# =========================================================================


class CloudProviderValues:
    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"


class CloudPlatformValues:
    AWS_EC2 = "aws_ec2"
    AWS_ELASTIC_BEANSTALK = "aws_elastic_beanstalk"
    AWS_LAMBDA = "aws_lambda"
    AZURE_APP_SERVICE = "azure_app_service"
    GCP_CLOUD_RUN = "gcp_cloud_run"
