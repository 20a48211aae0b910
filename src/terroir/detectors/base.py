# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Detector protocol and the probing helpers shared by the built-in detectors.

A detector is any object with an ``async detect(config)`` method returning an
:class:`~terroir.attributes.AttributeSet`.  Detection is speculative, so a
detector never raises: a negative answer is an empty set.

:class:`BaseDetector` implements that boundary once.  Subclasses write
``_detect`` in the straightforward way and raise
:class:`~terroir.errors.DetectionError` subclasses (or let anything else
escape); ``detect`` converts every failure into ``EMPTY`` plus a log record.
"""

from __future__ import annotations

import abc
import asyncio
import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

from terroir.attributes import EMPTY, AttributeSet, coerce
from terroir.config import DetectionConfig
from terroir.errors import AccessDenied, DetectionError, MalformedData, PlatformMismatch

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceDetector(Protocol):
    """Anything that can recognize a hosting platform."""

    async def detect(self, config: Optional[DetectionConfig] = None) -> AttributeSet: ...


class BaseDetector(abc.ABC):
    """Base class that absorbs detection failures."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}()"

    async def detect(self, config: Optional[DetectionConfig] = None) -> AttributeSet:
        try:
            if config is None:
                config = DetectionConfig()
            return coerce(await self._detect(config))
        except DetectionError as exc:
            level = logging.DEBUG
            if not isinstance(exc, PlatformMismatch) and getattr(config, "report_misconfiguration", False):
                level = logging.WARNING
            logger.log(
                level,
                "%s failed (%s): %s",
                self.name,
                exc.reason,
                exc,
                extra={"detector": self.name, "reason": exc.reason},
            )
        except Exception as exc:
            logger.debug(
                "%s failed: %s",
                self.name,
                exc,
                exc_info=True,
                extra={"detector": self.name, "reason": "unexpected"},
            )
        return EMPTY

    @abc.abstractmethod
    async def _detect(self, config: DetectionConfig) -> Mapping[str, Any]:
        """Probe the platform; raise :class:`DetectionError` when it is absent."""


# =========================================================================
# Probing helpers
# =========================================================================


def env(name: str) -> Optional[str]:
    """Return a non-blank environment variable, else ``None``."""
    value = os.environ.get(name)
    return value if value and value.strip() else None


def attributes_from_env(mapping: Mapping[str, str]) -> Dict[str, str]:
    """Collect ``{attribute: value}`` for every set variable in ``{ENV_VAR: attribute}``.

    When several variables map to the same attribute the first set one wins.
    """
    attrs: Dict[str, str] = {}
    for env_var, attr_name in mapping.items():
        value = env(env_var)
        if value and attr_name not in attrs:
            attrs[attr_name] = value
    return attrs


def _read_file(path: str) -> str:
    with open(path, encoding="utf-8") as fh:
        return fh.read()


async def read_text(path: str) -> str:
    """Read *path* as UTF-8 text without blocking the event loop.

    Raises:
        PlatformMismatch: The file does not exist.
        AccessDenied: The file exists but cannot be read.
        MalformedData: The file is not valid UTF-8.
    """
    if not await asyncio.to_thread(os.access, path, os.R_OK):
        if await asyncio.to_thread(os.path.exists, path):
            raise AccessDenied(f"{path} is not readable")
        raise PlatformMismatch(f"{path} not found")

    try:
        return await asyncio.to_thread(_read_file, path)
    except FileNotFoundError as exc:
        raise PlatformMismatch(f"{path} not found") from exc
    except UnicodeDecodeError as exc:
        raise MalformedData(f"{path} is not valid UTF-8") from exc
    except OSError as exc:
        raise AccessDenied(f"{path} could not be read: {exc}") from exc


async def read_json(path: str) -> Dict[str, Any]:
    """Read *path* and parse it as a JSON object."""
    raw = await read_text(path)
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise MalformedData(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedData(f"{path} does not contain a JSON object")
    return data


def _http_request(url: str, method: str, headers: Mapping[str, str], timeout: float) -> str:
    req = urllib.request.Request(url, method=method, headers=dict(headers))
    with urllib.request.urlopen(req, timeout=timeout) as resp:  # noqa: S310
        return resp.read().decode("utf-8")


async def http_request(
    url: str,
    *,
    method: str = "GET",
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 1.0,
) -> str:
    """Fetch *url* from a worker thread and return the body as text.

    Raises:
        PlatformMismatch: The endpoint is unreachable or answered with an error.
        MalformedData: The body is not valid UTF-8.
    """
    try:
        return await asyncio.to_thread(_http_request, url, method, headers or {}, timeout)
    except urllib.error.HTTPError as exc:
        raise PlatformMismatch(f"{method} {url} returned HTTP {exc.code}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedData(f"{method} {url} returned a non UTF-8 body") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise PlatformMismatch(f"{method} {url} failed: {exc}") from exc


__all__ = [
    "BaseDetector",
    "ResourceDetector",
    "attributes_from_env",
    "env",
    "http_request",
    "read_json",
    "read_text",
]
