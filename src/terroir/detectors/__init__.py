# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Built-in detectors and the name registry used by configuration.

Detector names in :class:`~terroir.config.DetectionConfig` are either one of
the short names below or a ``"module.path:attribute"`` reference to a detector
class (instantiated without arguments) or a ready-made detector instance::

    TERROIR_DETECTORS=process,host,aws_beanstalk,mypkg.detectors:OnPremDetector
"""

from __future__ import annotations

import importlib
import logging
from typing import Dict, Iterable, List, Tuple

from terroir.detectors.aws import AwsBeanstalkDetector, AwsEc2Detector, AwsLambdaDetector
from terroir.detectors.azure import AzureAppServiceDetector
from terroir.detectors.base import BaseDetector, ResourceDetector
from terroir.detectors.container import ContainerDetector
from terroir.detectors.gcp import GcpCloudRunDetector
from terroir.detectors.host import HostDetector, ProcessDetector
from terroir.detectors.kubernetes import KubernetesDetector
from terroir.errors import ConfigurationError

logger = logging.getLogger(__name__)

# name -> (module_path, class_name)
_DETECTOR_REGISTRY: Dict[str, Tuple[str, str]] = {
    "process": ("terroir.detectors.host", "ProcessDetector"),
    "host": ("terroir.detectors.host", "HostDetector"),
    "container": ("terroir.detectors.container", "ContainerDetector"),
    "kubernetes": ("terroir.detectors.kubernetes", "KubernetesDetector"),
    "aws_beanstalk": ("terroir.detectors.aws", "AwsBeanstalkDetector"),
    "aws_ec2": ("terroir.detectors.aws", "AwsEc2Detector"),
    "aws_lambda": ("terroir.detectors.aws", "AwsLambdaDetector"),
    "gcp_cloud_run": ("terroir.detectors.gcp", "GcpCloudRunDetector"),
    "azure_app_service": ("terroir.detectors.azure", "AzureAppServiceDetector"),
}


def available_detectors() -> List[str]:
    """Return the registered short names."""
    return list(_DETECTOR_REGISTRY)


def load_detector(name: str) -> ResourceDetector:
    """Return a detector for a registered name or ``module:attribute`` reference.

    Raises:
        ConfigurationError: Unknown name, unimportable reference, or an object
            without a ``detect`` method.
    """
    if name in _DETECTOR_REGISTRY:
        module_path, attr_name = _DETECTOR_REGISTRY[name]
    elif ":" in name:
        module_path, _, attr_name = name.partition(":")
    else:
        raise ConfigurationError(
            f"Unknown resource detector {name!r}; expected one of {', '.join(_DETECTOR_REGISTRY)} "
            "or a 'module:Class' reference"
        )

    try:
        mod = importlib.import_module(module_path)
        target = getattr(mod, attr_name)
    except (ImportError, AttributeError, ValueError) as exc:
        raise ConfigurationError(f"Cannot load resource detector {name!r}: {exc}") from exc

    if isinstance(target, type):
        try:
            target = target()
        except Exception as exc:
            raise ConfigurationError(f"Cannot instantiate resource detector {name!r}: {exc}") from exc

    if not callable(getattr(target, "detect", None)):
        raise ConfigurationError(f"{name!r} is not a resource detector (no detect method)")
    return target


def build_detectors(names: Iterable[str]) -> List[ResourceDetector]:
    """Instantiate detectors for *names*, preserving order."""
    if isinstance(names, str):
        raise ConfigurationError("Detector names must be a list, not a string")
    detectors = [load_detector(name) for name in names]
    logger.debug("Resource detectors: %s", [type(d).__name__ for d in detectors])
    return detectors


__all__ = [
    "AwsBeanstalkDetector",
    "AwsEc2Detector",
    "AwsLambdaDetector",
    "AzureAppServiceDetector",
    "BaseDetector",
    "ContainerDetector",
    "GcpCloudRunDetector",
    "HostDetector",
    "KubernetesDetector",
    "ProcessDetector",
    "ResourceDetector",
    "available_detectors",
    "build_detectors",
    "load_detector",
]
