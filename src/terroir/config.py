# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Configuration for resource detection.

Configuration precedence (highest to lowest):
1. Code arguments (explicit values passed to DetectionConfig)
2. Environment variables (TERROIR_*, OTEL_*)
3. YAML config file (terroir.yaml or specified path)
4. Built-in defaults
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from terroir.errors import ConfigurationError

logger = logging.getLogger(__name__)

MERGE_POLICIES = ("last_wins", "first_wins")

# Order is merge precedence: with "last_wins", later detectors override earlier ones.
DEFAULT_DETECTORS: List[str] = [
    "process",
    "host",
    "container",
    "kubernetes",
    "aws_beanstalk",
    "aws_lambda",
    "gcp_cloud_run",
    "azure_app_service",
]

_TRUE_VALUES = ("true", "1", "yes")


def _split_names(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class DetectionConfig:
    """Settings for a detection run.

    Example::

        >>> config = DetectionConfig(detectors=["aws_beanstalk", "container"], timeout=2.0)

        >>> # Or load from YAML
        >>> config = DetectionConfig.from_yaml("config/terroir.yaml")
    """

    # Detector names (registry short names or "module:Class"), in precedence order
    detectors: Optional[List[str]] = None

    # Seconds each detector may take before its result is discarded
    timeout: Optional[float] = None

    # Seconds for a single HTTP request to a metadata endpoint
    http_timeout: Optional[float] = None

    # Launch all detectors at once (True) or one after another (False)
    concurrent: Optional[bool] = None

    # "last_wins": later detectors override earlier ones; "first_wins": the reverse
    merge_policy: Optional[str] = None

    # Log access-denied / malformed-data failures at WARNING instead of DEBUG
    report_misconfiguration: Optional[bool] = None

    # Explicit service identity, layered over detected values
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    service_namespace: Optional[str] = None

    _config_file: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Apply environment variable defaults, then validate."""
        if self.detectors is None:
            # OTEL_EXPERIMENTAL_RESOURCE_DETECTORS lists SDK entry points ("otel", "terroir"), not terroir detectors
            env_detectors = os.getenv("TERROIR_DETECTORS")
            self.detectors = _split_names(env_detectors) if env_detectors else list(DEFAULT_DETECTORS)

        if self.timeout is None:
            env_timeout = _env_float("TERROIR_DETECTION_TIMEOUT")
            self.timeout = env_timeout if env_timeout is not None else 5.0

        if self.http_timeout is None:
            env_http_timeout = _env_float("TERROIR_HTTP_TIMEOUT")
            self.http_timeout = env_http_timeout if env_http_timeout is not None else 1.0

        if self.concurrent is None:
            env_concurrent = os.getenv("TERROIR_DETECTION_CONCURRENT")
            self.concurrent = env_concurrent.lower() in _TRUE_VALUES if env_concurrent is not None else True

        if self.merge_policy is None:
            self.merge_policy = os.getenv("TERROIR_MERGE_POLICY", "last_wins")

        if self.report_misconfiguration is None:
            env_report = os.getenv("TERROIR_REPORT_MISCONFIGURATION")
            self.report_misconfiguration = env_report is not None and env_report.lower() in _TRUE_VALUES

        if self.service_name is None:
            self.service_name = os.getenv("OTEL_SERVICE_NAME")

        if self.service_version is None:
            self.service_version = os.getenv("OTEL_SERVICE_VERSION")

        if self.service_namespace is None:
            self.service_namespace = os.getenv("OTEL_SERVICE_NAMESPACE")

        self._validate()

    def _validate(self) -> None:
        if isinstance(self.detectors, str) or not isinstance(self.detectors, (list, tuple)):
            raise ConfigurationError(f"detectors must be a list of names, got {type(self.detectors).__name__}")
        for name in self.detectors:
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError(f"Invalid detector name: {name!r}")
        self.detectors = [name.strip() for name in self.detectors]

        for attr in ("timeout", "http_timeout"):
            value = getattr(self, attr)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(f"{attr} must be a positive number, got {value!r}")

        if self.merge_policy not in MERGE_POLICIES:
            raise ConfigurationError(
                f"Unknown merge policy {self.merge_policy!r}; expected one of {', '.join(MERGE_POLICIES)}"
            )

    @property
    def service_attributes(self) -> Dict[str, Optional[str]]:
        """Configured ``service.*`` attributes (``None`` where unset)."""
        return {
            "service.name": self.service_name,
            "service.version": self.service_version,
            "service.namespace": self.service_namespace,
        }

    # ------------------------------------------------------------------
    # YAML loading
    # ------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, path: Optional[str] = None) -> DetectionConfig:
        """Load configuration from a YAML file.

        Supports environment variable interpolation using ``${VAR_NAME}`` syntax.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If YAML is malformed.
        """
        if path is None:
            raise FileNotFoundError("No config file path provided")

        resolved = Path(path)
        if not resolved.exists():
            raise FileNotFoundError(f"Config file not found: {resolved}")

        try:
            import yaml  # type: ignore[import-untyped]
        except ImportError as err:
            raise ImportError("PyYAML required for YAML config. Install with: pip install terroir[yaml]") from err

        with open(resolved) as fh:
            raw_content = fh.read()

        content = _interpolate_env_vars(raw_content)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {resolved}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config in {resolved}: expected a mapping at top level")

        return cls._from_dict(data, config_file=str(resolved))

    @classmethod
    def from_file_or_env(cls, path: Optional[str] = None) -> DetectionConfig:
        """Load config from file if exists, otherwise use environment variables.

        Search order:
        1. Explicit *path* argument
        2. ``TERROIR_CONFIG_FILE`` env var
        3. ``./terroir.yaml``
        4. ``./config/terroir.yaml``
        5. Falls back to env-only config
        """
        search_paths: List[Path] = []

        if path:
            search_paths.append(Path(path))

        env_path = os.getenv("TERROIR_CONFIG_FILE")
        if env_path:
            search_paths.append(Path(env_path))

        search_paths.extend(
            [
                Path("terroir.yaml"),
                Path("terroir.yml"),
                Path("config/terroir.yaml"),
                Path("config/terroir.yml"),
            ]
        )

        for candidate in search_paths:
            if candidate.exists():
                logger.info("Loading config from: %s", candidate)
                return cls.from_yaml(str(candidate))

        logger.debug("No config file found, using environment variables only")
        return cls()

    @classmethod
    def _from_dict(
        cls,
        data: Dict[str, Any],
        config_file: Optional[str] = None,
    ) -> DetectionConfig:
        """Create config from dictionary (parsed YAML).

        Environment variables still win over file values for unset keys, so
        only keys present in the file are passed explicitly.
        """
        service = data.get("service") or {}
        detection = data.get("detection") or {}
        if not isinstance(service, dict) or not isinstance(detection, dict):
            raise ConfigurationError("'service' and 'detection' sections must be mappings")

        explicit: Dict[str, Any] = {}
        for key in ("detectors", "timeout", "http_timeout", "concurrent", "merge_policy", "report_misconfiguration"):
            if detection.get(key) is not None:
                explicit[key] = detection[key]
        for key in ("name", "version", "namespace"):
            if service.get(key) is not None:
                explicit[f"service_{key}"] = service[key]

        env_overrides = cls._env_overrides()
        for key in env_overrides:
            explicit.pop(key, None)

        return cls(_config_file=config_file, **explicit)

    @staticmethod
    def _env_overrides() -> List[str]:
        """Fields whose environment variable is set (env beats YAML)."""
        env_map = {
            "detectors": ("TERROIR_DETECTORS",),
            "timeout": ("TERROIR_DETECTION_TIMEOUT",),
            "http_timeout": ("TERROIR_HTTP_TIMEOUT",),
            "concurrent": ("TERROIR_DETECTION_CONCURRENT",),
            "merge_policy": ("TERROIR_MERGE_POLICY",),
            "report_misconfiguration": ("TERROIR_REPORT_MISCONFIGURATION",),
            "service_name": ("OTEL_SERVICE_NAME",),
            "service_version": ("OTEL_SERVICE_VERSION",),
            "service_namespace": ("OTEL_SERVICE_NAMESPACE",),
        }
        return [name for name, env_vars in env_map.items() if any(os.getenv(var) for var in env_vars)]

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "service": {
                "name": self.service_name,
                "version": self.service_version,
                "namespace": self.service_namespace,
            },
            "detection": {
                "detectors": list(self.detectors or []),
                "timeout": self.timeout,
                "http_timeout": self.http_timeout,
                "concurrent": self.concurrent,
                "merge_policy": self.merge_policy,
                "report_misconfiguration": self.report_misconfiguration,
            },
        }


def _interpolate_env_vars(content: str) -> str:
    """Interpolate ``${VAR_NAME}`` and ``${VAR_NAME:-default}`` in *content*."""
    pattern = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

    def _replace(match: re.Match) -> str:  # type: ignore[type-arg]
        var_name = match.group(1)
        default = match.group(2)
        value = os.getenv(var_name)
        if value is not None:
            return value
        if default is not None:
            return default
        return match.group(0)

    return pattern.sub(_replace, content)
