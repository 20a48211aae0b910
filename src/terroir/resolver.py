# SPDX-FileCopyrightText: 2026 The Terroir Authors
# SPDX-License-Identifier: Apache-2.0

"""Run detectors and merge what they find.

All detectors are started before any is awaited, each bounded by
``config.timeout``.  Results are collected in configured order and folded
afterwards, so the merged set never depends on which probe finished first.
A detector that fails, hangs or misbehaves contributes an empty set; only a
bad configuration raises.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any, List, Optional

from terroir.attributes import EMPTY, AttributeSet, merge_all
from terroir.config import DetectionConfig
from terroir.detectors import ResourceDetector, build_detectors
from terroir.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _detector_name(detector: Any) -> str:
    return getattr(detector, "name", None) or type(detector).__name__


def _validate_detectors(detectors: Any) -> List[ResourceDetector]:
    if isinstance(detectors, (str, bytes)) or not isinstance(detectors, Iterable):
        raise ConfigurationError(f"detectors must be a sequence of detectors, got {type(detectors).__name__}")
    validated = list(detectors)
    for index, detector in enumerate(validated):
        if not callable(getattr(detector, "detect", None)):
            raise ConfigurationError(f"Detector at position {index} ({detector!r}) has no detect method")
    return validated


def _as_attribute_set(name: str, result: Any) -> AttributeSet:
    if isinstance(result, AttributeSet):
        return result
    if result is None:
        return EMPTY
    # Plain mappings, or OpenTelemetry Resource objects via their .attributes
    attributes = result if isinstance(result, Mapping) else getattr(result, "attributes", None)
    if isinstance(attributes, Mapping):
        try:
            return AttributeSet(attributes)
        except TypeError as exc:
            logger.debug("Detector %s returned unusable attributes: %s", name, exc)
            return EMPTY
    logger.debug("Detector %s returned %r, expected an AttributeSet", name, type(result).__name__)
    return EMPTY


async def _call_detect(detector: ResourceDetector, config: DetectionConfig) -> Any:
    if inspect.iscoroutinefunction(detector.detect):
        return await detector.detect(config)
    # Synchronous detect runs on a worker thread, under the same timeout.
    outcome = await asyncio.to_thread(detector.detect, config)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


async def _run_detector(detector: ResourceDetector, config: DetectionConfig) -> AttributeSet:
    name = _detector_name(detector)
    try:
        result = await asyncio.wait_for(_call_detect(detector, config), timeout=config.timeout)
    except asyncio.TimeoutError:
        logger.warning(
            "Detector %s took longer than %s seconds, skipping",
            name,
            config.timeout,
            extra={"detector": name, "reason": "timeout"},
        )
        return EMPTY
    except Exception as exc:
        # Detectors are supposed to absorb their own failures; third-party ones may not.
        logger.debug(
            "Exception %s in detector %s, ignoring",
            exc,
            name,
            exc_info=True,
            extra={"detector": name, "reason": "unexpected"},
        )
        return EMPTY

    attributes = _as_attribute_set(name, result)
    logger.debug("Detector %s found %d attribute(s)", name, len(attributes))
    return attributes


async def resolve(
    detectors: Optional[Iterable[ResourceDetector]] = None,
    config: Optional[DetectionConfig] = None,
) -> AttributeSet:
    """Run *detectors* and return their merged attributes.

    A detector with a plain (non-async) ``detect`` runs on a worker thread
    and is bounded by the same timeout.

    Args:
        detectors: Detectors in precedence order.  Defaults to the ones named
            by ``config.detectors``.
        config: Detection settings.  Defaults to ``DetectionConfig()``.

    Returns:
        The merged attributes; empty when no platform was recognized.

    Raises:
        ConfigurationError: If *detectors* or *config* is invalid.
    """
    if config is None:
        config = DetectionConfig()
    elif not isinstance(config, DetectionConfig):
        raise ConfigurationError(f"config must be a DetectionConfig, got {type(config).__name__}")

    if detectors is None:
        detectors = build_detectors(config.detectors or [])
    validated = _validate_detectors(detectors)

    if config.concurrent:
        results = list(await asyncio.gather(*(_run_detector(d, config) for d in validated)))
    else:
        results = [await _run_detector(d, config) for d in validated]

    if config.merge_policy == "first_wins":
        results.reverse()
    merged = merge_all(results)

    logger.debug(
        "Resolved %d resource attribute(s) from %d detector(s)",
        len(merged),
        len(validated),
    )
    return merged


def _run_until_complete(coro: Any) -> AttributeSet:
    """Drive *coro* on a fresh event loop.

    Unlike ``asyncio.run`` this does not join the default executor on the way
    out, so worker threads still stuck in abandoned file or HTTP reads do not
    hold up the caller.
    """
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            asyncio.set_event_loop(None)
            # close() shuts the default executor down with wait=False
            loop.close()


def resolve_sync(
    detectors: Optional[Iterable[ResourceDetector]] = None,
    config: Optional[DetectionConfig] = None,
) -> AttributeSet:
    """Blocking variant of :func:`resolve` for synchronous startup code.

    Inside a running event loop the resolution runs on a worker thread with
    its own loop, so it can be called from anywhere.  Either way the call
    returns once every detector has finished or timed out.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _run_until_complete(resolve(detectors, config))

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(_run_until_complete, resolve(detectors, config)).result()


__all__ = ["resolve", "resolve_sync"]
