# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared test fixtures for terroir tests."""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Callable, Dict, Optional
from unittest import mock

import pytest

from terroir import bootstrap
from terroir.attributes import AttributeSet


class StaticDetector:
    """Detector returning fixed attributes after an optional delay."""

    def __init__(self, attributes: Dict[str, Any], delay: float = 0.0) -> None:
        self.attributes = AttributeSet(attributes)
        self.delay = delay
        self.calls = 0

    async def detect(self, config=None) -> AttributeSet:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.attributes


class HangingDetector:
    """Detector that never finishes on its own."""

    def __init__(self) -> None:
        self.cancelled = False

    async def detect(self, config=None) -> AttributeSet:
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return AttributeSet()  # pragma: no cover


class RaisingDetector:
    """Detector that breaks the contract by raising."""

    async def detect(self, config=None) -> AttributeSet:
        raise RuntimeError("boom")


@pytest.fixture
def static_detector() -> Callable[..., StaticDetector]:
    return StaticDetector


@pytest.fixture
def hanging_detector() -> HangingDetector:
    return HangingDetector()


@pytest.fixture
def raising_detector() -> RaisingDetector:
    return RaisingDetector()


@pytest.fixture
def clean_env():
    """Run the test with an empty environment."""
    with mock.patch.dict(os.environ, {}, clear=True):
        yield os.environ


@pytest.fixture
def write_beanstalk_conf(tmp_path) -> Callable[[Optional[Any]], str]:
    """Write a Beanstalk environment.conf and return its path.

    Dicts are JSON encoded; strings are written verbatim.
    """

    def _write(content: Any) -> str:
        path = tmp_path / "environment.conf"
        path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def reset_bootstrap():
    """Forget the cached process-wide resource around each test."""
    bootstrap.reset()
    yield
    bootstrap.reset()
