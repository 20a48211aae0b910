# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Exception types.

Only :class:`ConfigurationError` ever reaches callers of the resolver.  The
:class:`DetectionError` family is raised inside detectors and absorbed at
their boundary, where it is turned into an empty attribute set and a log line.
"""

from __future__ import annotations


class TerroirError(Exception):
    """Base class for all terroir errors."""


class ConfigurationError(TerroirError, ValueError):
    """Invalid detector list, detector name or policy setting."""


class DetectionError(TerroirError):
    """A detector could not identify its platform."""

    reason = "detection_failed"


class PlatformMismatch(DetectionError):
    """The platform artifact is absent; the process runs somewhere else."""

    reason = "platform_mismatch"


class AccessDenied(DetectionError):
    """The platform artifact exists but cannot be read."""

    reason = "access_denied"


class MalformedData(DetectionError):
    """The platform artifact was read but does not have the expected shape."""

    reason = "malformed_data"


__all__ = [
    "AccessDenied",
    "ConfigurationError",
    "DetectionError",
    "MalformedData",
    "PlatformMismatch",
    "TerroirError",
]
