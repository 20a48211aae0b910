# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Terroir - detect where a service runs and describe it as OpenTelemetry resource attributes.

Quick Start::

    from terroir import DetectionConfig, configure_tracer_provider

    configure_tracer_provider()  # reads TERROIR_* / OTEL_* env vars

Or run detectors directly::

    from terroir import AwsBeanstalkDetector, ContainerDetector, resolve

    attributes = await resolve([ContainerDetector(), AwsBeanstalkDetector()])
"""

from __future__ import annotations

from terroir._version import __version__

# Attributes
from terroir.attributes import EMPTY, AttributeSet, merge

# Bootstrap
from terroir.bootstrap import (
    TerroirResourceDetector,
    configure_tracer_provider,
    create_resource,
    detect_attributes,
    get_resource,
)

# Configuration
from terroir.config import DetectionConfig

# Detectors
from terroir.detectors import (
    AwsBeanstalkDetector,
    AwsEc2Detector,
    AwsLambdaDetector,
    AzureAppServiceDetector,
    BaseDetector,
    ContainerDetector,
    GcpCloudRunDetector,
    HostDetector,
    KubernetesDetector,
    ProcessDetector,
    ResourceDetector,
    build_detectors,
)
from terroir.errors import ConfigurationError

# Resolution
from terroir.resolver import resolve, resolve_sync

__all__ = [
    "__version__",
    # Attributes
    "AttributeSet",
    "EMPTY",
    "merge",
    # Configuration
    "DetectionConfig",
    "ConfigurationError",
    # Detectors
    "ResourceDetector",
    "BaseDetector",
    "AwsBeanstalkDetector",
    "AwsEc2Detector",
    "AwsLambdaDetector",
    "AzureAppServiceDetector",
    "ContainerDetector",
    "GcpCloudRunDetector",
    "HostDetector",
    "KubernetesDetector",
    "ProcessDetector",
    "build_detectors",
    # Resolution
    "resolve",
    "resolve_sync",
    # Bootstrap
    "create_resource",
    "configure_tracer_provider",
    "detect_attributes",
    "get_resource",
    "TerroirResourceDetector",
]
