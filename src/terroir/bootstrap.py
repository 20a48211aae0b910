# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Hand detected attributes to the OpenTelemetry SDK.

Usage::

    from terroir import configure_tracer_provider
    configure_tracer_provider()  # detects once, installs a TracerProvider with the Resource

Or plug into an existing SDK setup::

    from opentelemetry.sdk.resources import get_aggregated_resources
    from terroir import TerroirResourceDetector

    resource = get_aggregated_resources([TerroirResourceDetector()])

The detector is also registered under the ``opentelemetry_resource_detector``
entry point group as ``terroir``, so
``OTEL_EXPERIMENTAL_RESOURCE_DETECTORS=terroir`` works with the SDK's own
configurator.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, ResourceDetector
from opentelemetry.sdk.trace import TracerProvider

from terroir.attributes import AttributeSet
from terroir.config import DetectionConfig
from terroir.detectors import ResourceDetector as Detector
from terroir.resolver import resolve_sync

logger = logging.getLogger(__name__)

_lock = threading.RLock()
_resource: Optional[Resource] = None


def detect_attributes(config: Optional[DetectionConfig] = None) -> AttributeSet:
    """Run the configured detectors and return the merged attributes."""
    return resolve_sync(config=config or DetectionConfig())


def create_resource(
    config: Optional[DetectionConfig] = None,
    detectors: Optional[Iterable[Detector]] = None,
) -> Resource:
    """Build an OpenTelemetry :class:`Resource` from detected attributes.

    Explicitly configured ``service.*`` values override detected ones.  The
    result goes through ``Resource.create`` so ``OTEL_RESOURCE_ATTRIBUTES``
    and the SDK's ``telemetry.sdk.*`` attributes are applied as usual.
    """
    cfg = config or DetectionConfig()
    detected = resolve_sync(detectors, cfg)
    if detected:
        logger.debug("Auto-detected resources: %s", list(detected.keys()))

    attrs = detected.merge(cfg.service_attributes)
    return Resource.create(attrs.to_dict())


def get_resource(config: Optional[DetectionConfig] = None) -> Resource:
    """Return the process-wide resource, detecting it on first use.

    The result is cached for the process lifetime; call :func:`reset` to
    detect again.  *config* only matters on the first call.
    """
    global _resource

    with _lock:
        if _resource is None:
            _resource = create_resource(config)
        return _resource


def reset() -> None:
    """Forget the cached resource."""
    global _resource

    with _lock:
        _resource = None


def configure_tracer_provider(config: Optional[DetectionConfig] = None) -> TracerProvider:
    """Install a global :class:`TracerProvider` carrying the detected resource.

    An SDK provider that is already installed is returned unchanged, since the
    resource of a provider cannot be replaced after construction.
    """
    with _lock:
        existing = trace.get_tracer_provider()
        if isinstance(existing, TracerProvider):
            logger.info("Reusing existing TracerProvider; detected resource not applied")
            return existing

        provider = TracerProvider(resource=get_resource(config))
        trace.set_tracer_provider(provider)
        logger.info("TracerProvider installed with detected resource")
        return provider


class TerroirResourceDetector(ResourceDetector):
    """OpenTelemetry SDK detector that runs the configured terroir detectors."""

    def __init__(self, config: Optional[DetectionConfig] = None, raise_on_error: bool = False) -> None:
        super().__init__(raise_on_error=raise_on_error)
        self._config = config

    def detect(self) -> Resource:
        # Instantiate Resource directly; Resource.create would recurse into detectors.
        return detect_attributes(self._config).to_resource()


__all__ = [
    "TerroirResourceDetector",
    "configure_tracer_provider",
    "create_resource",
    "detect_attributes",
    "get_resource",
    "reset",
]
