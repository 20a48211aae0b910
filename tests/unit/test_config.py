# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for DetectionConfig."""

from __future__ import annotations

import os
from unittest import mock

import pytest

from terroir.config import DEFAULT_DETECTORS, DetectionConfig, _interpolate_env_vars
from terroir.errors import ConfigurationError


class TestInterpolateEnvVars:
    """Tests for environment variable interpolation."""

    def test_interpolates_env_vars(self):
        with mock.patch.dict(os.environ, {"MY_VAR": "my_value"}):
            result = _interpolate_env_vars("timeout: ${MY_VAR}")
            assert result == "timeout: my_value"

    def test_preserves_unset_vars(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            result = _interpolate_env_vars("timeout: ${UNSET_VAR}")
            assert result == "timeout: ${UNSET_VAR}"

    def test_default_value_when_unset(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            result = _interpolate_env_vars("timeout: ${UNSET_VAR:-3}")
            assert result == "timeout: 3"

    def test_default_value_ignored_when_set(self):
        with mock.patch.dict(os.environ, {"MY_VAR": "7"}):
            result = _interpolate_env_vars("timeout: ${MY_VAR:-3}")
            assert result == "timeout: 7"


class TestDetectionConfigDefaults:
    """Tests for DetectionConfig defaults."""

    def test_default_values(self, clean_env):
        config = DetectionConfig()

        assert config.detectors == DEFAULT_DETECTORS
        assert config.timeout == 5.0
        assert config.http_timeout == 1.0
        assert config.concurrent is True
        assert config.merge_policy == "last_wins"
        assert config.report_misconfiguration is False
        assert config.service_name is None

    def test_default_detectors_exclude_network_probes(self, clean_env):
        assert "aws_ec2" not in DetectionConfig().detectors

    def test_default_list_is_not_shared(self, clean_env):
        config = DetectionConfig()
        config.detectors.append("aws_ec2")
        assert "aws_ec2" not in DEFAULT_DETECTORS


class TestDetectionConfigEnv:
    """Tests for environment variable handling."""

    def test_env_detectors(self, clean_env):
        with mock.patch.dict(os.environ, {"TERROIR_DETECTORS": "aws_beanstalk, container ,"}):
            config = DetectionConfig()
            assert config.detectors == ["aws_beanstalk", "container"]

    def test_sdk_detector_list_is_not_ours(self, clean_env):
        # The SDK's entry point names must not be read as terroir detector names.
        with mock.patch.dict(os.environ, {"OTEL_EXPERIMENTAL_RESOURCE_DETECTORS": "otel,terroir"}):
            assert DetectionConfig().detectors == DEFAULT_DETECTORS

    def test_sdk_detector_list_does_not_mask_terroir_detectors(self, clean_env):
        env = {
            "TERROIR_DETECTORS": "aws_ec2",
            "OTEL_EXPERIMENTAL_RESOURCE_DETECTORS": "otel",
        }
        with mock.patch.dict(os.environ, env):
            assert DetectionConfig().detectors == ["aws_ec2"]

    def test_env_timeouts(self, clean_env):
        env = {"TERROIR_DETECTION_TIMEOUT": "2.5", "TERROIR_HTTP_TIMEOUT": "0.25"}
        with mock.patch.dict(os.environ, env):
            config = DetectionConfig()
            assert config.timeout == 2.5
            assert config.http_timeout == 0.25

    def test_env_timeout_not_a_number(self, clean_env):
        with mock.patch.dict(os.environ, {"TERROIR_DETECTION_TIMEOUT": "soon"}):
            with pytest.raises(ConfigurationError):
                DetectionConfig()

    def test_env_concurrent(self, clean_env):
        with mock.patch.dict(os.environ, {"TERROIR_DETECTION_CONCURRENT": "false"}):
            assert DetectionConfig().concurrent is False

    def test_env_merge_policy(self, clean_env):
        with mock.patch.dict(os.environ, {"TERROIR_MERGE_POLICY": "first_wins"}):
            assert DetectionConfig().merge_policy == "first_wins"

    def test_env_report_misconfiguration(self, clean_env):
        with mock.patch.dict(os.environ, {"TERROIR_REPORT_MISCONFIGURATION": "yes"}):
            assert DetectionConfig().report_misconfiguration is True

    def test_env_service_identity(self, clean_env):
        env = {
            "OTEL_SERVICE_NAME": "checkout",
            "OTEL_SERVICE_VERSION": "1.2.3",
            "OTEL_SERVICE_NAMESPACE": "shop",
        }
        with mock.patch.dict(os.environ, env):
            config = DetectionConfig()
            assert config.service_attributes == {
                "service.name": "checkout",
                "service.version": "1.2.3",
                "service.namespace": "shop",
            }

    def test_explicit_values_override_env(self, clean_env):
        with mock.patch.dict(os.environ, {"TERROIR_DETECTION_TIMEOUT": "9", "OTEL_SERVICE_NAME": "env-svc"}):
            config = DetectionConfig(timeout=1.0, service_name="explicit-svc")
            assert config.timeout == 1.0
            assert config.service_name == "explicit-svc"


class TestDetectionConfigValidation:
    """Invalid settings raise ConfigurationError."""

    @pytest.mark.parametrize("timeout", [0, -1, "5", True])
    def test_invalid_timeout(self, clean_env, timeout):
        with pytest.raises(ConfigurationError):
            DetectionConfig(timeout=timeout)

    def test_invalid_merge_policy(self, clean_env):
        with pytest.raises(ConfigurationError):
            DetectionConfig(merge_policy="random")

    def test_detectors_must_be_a_list(self, clean_env):
        with pytest.raises(ConfigurationError):
            DetectionConfig(detectors="aws_beanstalk")  # type: ignore[arg-type]

    def test_blank_detector_name(self, clean_env):
        with pytest.raises(ConfigurationError):
            DetectionConfig(detectors=["host", " "])

    def test_configuration_error_is_a_value_error(self, clean_env):
        with pytest.raises(ValueError):
            DetectionConfig(merge_policy="random")


class TestDetectionConfigFromYaml:
    """Tests for loading config from YAML."""

    def test_from_yaml_basic(self, clean_env, tmp_path):
        yaml_content = """
service:
  name: yaml-service
detection:
  detectors: [aws_beanstalk, container]
  timeout: 2
  concurrent: false
  merge_policy: first_wins
"""
        yaml_file = tmp_path / "terroir.yaml"
        yaml_file.write_text(yaml_content)

        config = DetectionConfig.from_yaml(str(yaml_file))
        assert config.service_name == "yaml-service"
        assert config.detectors == ["aws_beanstalk", "container"]
        assert config.timeout == 2
        assert config.concurrent is False
        assert config.merge_policy == "first_wins"

    def test_env_beats_yaml(self, clean_env, tmp_path):
        yaml_file = tmp_path / "terroir.yaml"
        yaml_file.write_text("detection:\n  timeout: 2\n")

        with mock.patch.dict(os.environ, {"TERROIR_DETECTION_TIMEOUT": "8"}):
            config = DetectionConfig.from_yaml(str(yaml_file))
            assert config.timeout == 8.0

    def test_from_yaml_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            DetectionConfig.from_yaml("/nonexistent/path/terroir.yaml")

    def test_from_yaml_no_path(self):
        with pytest.raises(FileNotFoundError):
            DetectionConfig.from_yaml(None)

    def test_from_yaml_empty_file(self, clean_env, tmp_path):
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        config = DetectionConfig.from_yaml(str(yaml_file))
        assert config.detectors == DEFAULT_DETECTORS

    def test_from_yaml_malformed(self, clean_env, tmp_path):
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("detection: [unclosed\n")

        with pytest.raises(ValueError):
            DetectionConfig.from_yaml(str(yaml_file))

    def test_from_yaml_invalid_values(self, clean_env, tmp_path):
        yaml_file = tmp_path / "terroir.yaml"
        yaml_file.write_text("detection:\n  merge_policy: sometimes\n")

        with pytest.raises(ConfigurationError):
            DetectionConfig.from_yaml(str(yaml_file))

    def test_from_yaml_env_interpolation(self, clean_env, tmp_path):
        yaml_file = tmp_path / "terroir.yaml"
        yaml_file.write_text("service:\n  name: ${TEST_SERVICE_NAME}\n")

        with mock.patch.dict(os.environ, {"TEST_SERVICE_NAME": "interpolated-service"}):
            config = DetectionConfig.from_yaml(str(yaml_file))
            assert config.service_name == "interpolated-service"


class TestDetectionConfigFromFileOrEnv:
    """Tests for from_file_or_env method."""

    def test_uses_env_when_no_file(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with mock.patch.dict(os.environ, {"TERROIR_DETECTORS": "host"}):
            config = DetectionConfig.from_file_or_env()
            assert config.detectors == ["host"]

    def test_uses_specified_path(self, clean_env, tmp_path):
        yaml_file = tmp_path / "custom.yaml"
        yaml_file.write_text("detection:\n  detectors: [process]\n")

        config = DetectionConfig.from_file_or_env(path=str(yaml_file))
        assert config.detectors == ["process"]

    def test_uses_env_config_file(self, clean_env, tmp_path):
        yaml_file = tmp_path / "from-env.yaml"
        yaml_file.write_text("detection:\n  detectors: [container]\n")

        with mock.patch.dict(os.environ, {"TERROIR_CONFIG_FILE": str(yaml_file)}):
            config = DetectionConfig.from_file_or_env()
            assert config.detectors == ["container"]

    def test_finds_default_file_in_cwd(self, clean_env, tmp_path, monkeypatch):
        (tmp_path / "terroir.yaml").write_text("detection:\n  detectors: [kubernetes]\n")
        monkeypatch.chdir(tmp_path)

        config = DetectionConfig.from_file_or_env()
        assert config.detectors == ["kubernetes"]


class TestDetectionConfigToDict:
    """Tests for config serialization."""

    def test_to_dict(self, clean_env):
        config = DetectionConfig(detectors=["host"], timeout=3.0, service_name="svc")
        d = config.to_dict()

        assert d["service"]["name"] == "svc"
        assert d["detection"]["detectors"] == ["host"]
        assert d["detection"]["timeout"] == 3.0
        assert d["detection"]["merge_policy"] == "last_wins"
