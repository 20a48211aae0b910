# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Google Cloud Run detection."""

from __future__ import annotations

from typing import Any, Dict

from terroir import semconv
from terroir.config import DetectionConfig
from terroir.detectors.base import BaseDetector, attributes_from_env, env
from terroir.errors import PlatformMismatch
from terroir.semconv import CloudPlatformValues, CloudProviderValues

CLOUD_RUN_ENV_MAPPINGS: Dict[str, str] = {
    "K_SERVICE": semconv.FAAS_NAME,
    "K_REVISION": semconv.FAAS_VERSION,
    "GOOGLE_CLOUD_PROJECT": semconv.CLOUD_ACCOUNT_ID,
    "GCLOUD_PROJECT": semconv.CLOUD_ACCOUNT_ID,
    "GOOGLE_CLOUD_REGION": semconv.CLOUD_REGION,
}


class GcpCloudRunDetector(BaseDetector):
    """Detect Cloud Run from the ``K_*`` variables set by Knative."""

    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        if not env("K_SERVICE"):
            raise PlatformMismatch("K_SERVICE not set")

        attrs: Dict[str, Any] = {
            semconv.CLOUD_PROVIDER: CloudProviderValues.GCP,
            semconv.CLOUD_PLATFORM: CloudPlatformValues.GCP_CLOUD_RUN,
        }
        attrs.update(attributes_from_env(CLOUD_RUN_ENV_MAPPINGS))
        return attrs
