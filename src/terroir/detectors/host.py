# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Host and process detectors.

These always succeed; they describe the machine and interpreter rather than a
hosting platform, and sit at the front of the default detector list so that
platform detectors can refine ``host.*`` values.
"""

from __future__ import annotations

import asyncio
import os
import platform
import socket
import sys
from typing import Any, Dict

from terroir import semconv
from terroir.config import DetectionConfig
from terroir.detectors.base import BaseDetector, env

_ARCH_VALUES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "x86",
    "i686": "x86",
    "ppc64le": "ppc64",
    "s390x": "s390x",
}


class HostDetector(BaseDetector):
    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {}

        hostname = await asyncio.to_thread(socket.gethostname)
        if hostname:
            attrs[semconv.HOST_NAME] = hostname

        host_id = env("HOST_ID")
        if host_id:
            attrs[semconv.HOST_ID] = host_id

        machine = platform.machine().lower()
        if machine:
            attrs[semconv.HOST_ARCH] = _ARCH_VALUES.get(machine, machine)

        system = platform.system().lower()
        if system:
            attrs[semconv.OS_TYPE] = system
        return attrs


class ProcessDetector(BaseDetector):
    async def _detect(self, config: DetectionConfig) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {
            semconv.PROCESS_PID: os.getpid(),
            semconv.PROCESS_RUNTIME_NAME: sys.implementation.name,
            semconv.PROCESS_RUNTIME_VERSION: platform.python_version(),
            semconv.PROCESS_RUNTIME_DESCRIPTION: sys.version,
        }
        if sys.executable:
            attrs[semconv.PROCESS_EXECUTABLE_PATH] = sys.executable
        if sys.argv and sys.argv[0]:
            attrs[semconv.PROCESS_COMMAND] = sys.argv[0][:200]
        return attrs
