# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Container detection from the process's cgroup information."""

from __future__ import annotations

import asyncio
import os
import re
from typing import Any, Dict, Optional

from terroir import semconv
from terroir.config import DetectionConfig
from terroir.detectors.base import BaseDetector, read_text
from terroir.errors import DetectionError, PlatformMismatch

CGROUP_PATH = "/proc/self/cgroup"
MOUNTINFO_PATH = "/proc/self/mountinfo"
DOCKERENV_PATH = "/.dockerenv"

# cgroup v1: ".../docker/<id>", ".../cri-containerd-<id>.scope", ".../docker-<id>.scope"
_CGROUP_ID = re.compile(r"([0-9a-f]{64})(?:\.scope)?$")
# cgroup v2: the runtime bind-mounts /etc/hostname from ".../containers/<id>/hostname"
_MOUNTINFO_ID = re.compile(r"/containers/([0-9a-f]{64})/")


def parse_cgroup(content: str) -> Optional[str]:
    """Extract a container id from ``/proc/self/cgroup`` content."""
    for line in content.splitlines():
        last = line.strip().rsplit("/", 1)[-1]
        match = _CGROUP_ID.search(last)
        if match:
            return match.group(1)
    return None


def parse_mountinfo(content: str) -> Optional[str]:
    """Extract a container id from ``/proc/self/mountinfo`` content."""
    for line in content.splitlines():
        match = _MOUNTINFO_ID.search(line)
        if match:
            return match.group(1)
    return None


class ContainerDetector(BaseDetector):
    """Detect a container id (cgroup v1 first, then v2 mountinfo)."""

    def __init__(
        self,
        cgroup_path: str = CGROUP_PATH,
        mountinfo_path: str = MOUNTINFO_PATH,
        dockerenv_path: str = DOCKERENV_PATH,
    ) -> None:
        self._cgroup_path = cgroup_path
        self._mountinfo_path = mountinfo_path
        self._dockerenv_path = dockerenv_path

    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        container_id = await self._container_id()
        if container_id is None:
            raise PlatformMismatch("no container id in cgroup or mountinfo")

        attrs: Dict[str, Any] = {semconv.CONTAINER_ID: container_id}
        if await asyncio.to_thread(os.path.exists, self._dockerenv_path):
            attrs[semconv.CONTAINER_RUNTIME] = "docker"
        return attrs

    async def _container_id(self) -> Optional[str]:
        try:
            container_id = parse_cgroup(await read_text(self._cgroup_path))
        except DetectionError:
            container_id = None
        if container_id:
            return container_id
        return parse_mountinfo(await read_text(self._mountinfo_path))
