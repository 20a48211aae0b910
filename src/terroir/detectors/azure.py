# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Azure App Service detection."""

from __future__ import annotations

from typing import Any, Dict

from terroir import semconv
from terroir.config import DetectionConfig
from terroir.detectors.base import BaseDetector, attributes_from_env, env
from terroir.errors import PlatformMismatch
from terroir.semconv import CloudPlatformValues, CloudProviderValues

APP_SERVICE_ENV_MAPPINGS: Dict[str, str] = {
    "WEBSITE_SITE_NAME": semconv.SERVICE_NAME,
    "REGION_NAME": semconv.CLOUD_REGION,
    "WEBSITE_HOSTNAME": semconv.HOST_ID,
    "WEBSITE_INSTANCE_ID": semconv.SERVICE_INSTANCE_ID,
    "WEBSITE_HOME_STAMPNAME": semconv.AZURE_APP_SERVICE_STAMP,
}


class AzureAppServiceDetector(BaseDetector):
    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        if not env("WEBSITE_SITE_NAME"):
            raise PlatformMismatch("WEBSITE_SITE_NAME not set")

        attrs: Dict[str, Any] = {
            semconv.CLOUD_PROVIDER: CloudProviderValues.AZURE,
            semconv.CLOUD_PLATFORM: CloudPlatformValues.AZURE_APP_SERVICE,
        }
        attrs.update(attributes_from_env(APP_SERVICE_ENV_MAPPINGS))
        return attrs
