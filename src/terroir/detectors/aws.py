# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""AWS detectors: Elastic Beanstalk, EC2 and Lambda."""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from terroir import semconv
from terroir.config import DetectionConfig
from terroir.detectors.base import BaseDetector, attributes_from_env, env, http_request, read_json
from terroir.errors import MalformedData, PlatformMismatch
from terroir.semconv import CloudPlatformValues, CloudProviderValues

# =========================================================================
# Elastic Beanstalk
# =========================================================================

# Written by the X-Ray integration on every Beanstalk instance.
DEFAULT_BEANSTALK_CONF_PATH = "/var/elasticbeanstalk/xray/environment.conf"
WIN_OS_BEANSTALK_CONF_PATH = "C:\\Program Files\\Amazon\\XRay\\environment.conf"


class AwsBeanstalkDetector(BaseDetector):
    """Detect AWS Elastic Beanstalk from its X-Ray environment file.

    The file is a JSON object with ``environment_name``, ``version_label`` and
    ``deployment_id``.  Missing fields are left out of the result.
    """

    def __init__(self, conf_path: Optional[str] = None) -> None:
        if conf_path is None:
            conf_path = WIN_OS_BEANSTALK_CONF_PATH if sys.platform == "win32" else DEFAULT_BEANSTALK_CONF_PATH
        self._conf_path = conf_path

    @property
    def conf_path(self) -> str:
        return self._conf_path

    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        data = await read_json(self._conf_path)
        return {
            semconv.CLOUD_PROVIDER: CloudProviderValues.AWS,
            semconv.CLOUD_PLATFORM: CloudPlatformValues.AWS_ELASTIC_BEANSTALK,
            semconv.SERVICE_NAME: CloudPlatformValues.AWS_ELASTIC_BEANSTALK,
            semconv.SERVICE_NAMESPACE: data.get("environment_name"),
            semconv.SERVICE_VERSION: data.get("version_label"),
            semconv.SERVICE_INSTANCE_ID: data.get("deployment_id"),
        }


# =========================================================================
# EC2 (instance metadata service, IMDSv2)
# =========================================================================

DEFAULT_IMDS_ENDPOINT = "http://169.254.169.254"
_TOKEN_PATH = "/latest/api/token"
_IDENTITY_DOCUMENT_PATH = "/latest/dynamic/instance-identity/document"
_HOSTNAME_PATH = "/latest/meta-data/hostname"
_TOKEN_TTL_SECONDS = "60"


class AwsEc2Detector(BaseDetector):
    """Detect EC2 through the instance metadata service.

    Honours ``AWS_EC2_METADATA_DISABLED`` and
    ``AWS_EC2_METADATA_SERVICE_ENDPOINT`` like the AWS SDKs do.
    """

    def __init__(self, endpoint: Optional[str] = None) -> None:
        self._endpoint = endpoint

    @property
    def endpoint(self) -> str:
        endpoint = self._endpoint or env("AWS_EC2_METADATA_SERVICE_ENDPOINT") or DEFAULT_IMDS_ENDPOINT
        return endpoint.rstrip("/")

    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        if (env("AWS_EC2_METADATA_DISABLED") or "").lower() == "true":
            raise PlatformMismatch("instance metadata disabled by AWS_EC2_METADATA_DISABLED")
        if env("AWS_LAMBDA_FUNCTION_NAME"):
            raise PlatformMismatch("running on AWS Lambda")

        endpoint = self.endpoint
        timeout = config.http_timeout

        token = await http_request(
            endpoint + _TOKEN_PATH,
            method="PUT",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": _TOKEN_TTL_SECONDS},
            timeout=timeout,
        )
        headers = {"X-aws-ec2-metadata-token": token.strip()}

        raw_document = await http_request(endpoint + _IDENTITY_DOCUMENT_PATH, headers=headers, timeout=timeout)
        try:
            document = json.loads(raw_document)
        except ValueError as exc:
            raise MalformedData(f"identity document is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise MalformedData("identity document is not a JSON object")

        hostname = await http_request(endpoint + _HOSTNAME_PATH, headers=headers, timeout=timeout)

        return {
            semconv.CLOUD_PROVIDER: CloudProviderValues.AWS,
            semconv.CLOUD_PLATFORM: CloudPlatformValues.AWS_EC2,
            semconv.CLOUD_ACCOUNT_ID: document.get("accountId"),
            semconv.CLOUD_REGION: document.get("region"),
            semconv.CLOUD_AVAILABILITY_ZONE: document.get("availabilityZone"),
            semconv.HOST_ID: document.get("instanceId"),
            semconv.HOST_TYPE: document.get("instanceType"),
            semconv.HOST_NAME: hostname.strip() or None,
        }


# =========================================================================
# Lambda
# =========================================================================

LAMBDA_ENV_MAPPINGS: Dict[str, str] = {
    "AWS_REGION": semconv.CLOUD_REGION,
    "AWS_DEFAULT_REGION": semconv.CLOUD_REGION,
    "AWS_LAMBDA_FUNCTION_NAME": semconv.FAAS_NAME,
    "AWS_LAMBDA_FUNCTION_VERSION": semconv.FAAS_VERSION,
    "AWS_LAMBDA_LOG_STREAM_NAME": semconv.FAAS_INSTANCE,
}


class AwsLambdaDetector(BaseDetector):
    """Detect AWS Lambda from the runtime's environment variables."""

    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        if not env("AWS_LAMBDA_FUNCTION_NAME"):
            raise PlatformMismatch("AWS_LAMBDA_FUNCTION_NAME not set")

        attrs: Dict[str, Any] = {
            semconv.CLOUD_PROVIDER: CloudProviderValues.AWS,
            semconv.CLOUD_PLATFORM: CloudPlatformValues.AWS_LAMBDA,
        }
        attrs.update(attributes_from_env(LAMBDA_ENV_MAPPINGS))

        memory = env("AWS_LAMBDA_FUNCTION_MEMORY_SIZE")
        if memory:
            try:
                attrs[semconv.FAAS_MAX_MEMORY] = int(memory) * 1024 * 1024
            except ValueError as exc:
                raise MalformedData(f"AWS_LAMBDA_FUNCTION_MEMORY_SIZE is not an integer: {memory!r}") from exc
        return attrs


__all__ = [
    "DEFAULT_BEANSTALK_CONF_PATH",
    "WIN_OS_BEANSTALK_CONF_PATH",
    "AwsBeanstalkDetector",
    "AwsEc2Detector",
    "AwsLambdaDetector",
]
