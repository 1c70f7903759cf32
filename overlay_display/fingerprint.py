"""Stable monitor identity derived from reported geometry."""
from __future__ import annotations

import hashlib
import json
import logging

from overlay_display.geometry import InvalidMonitorError, MonitorDescriptor, validate_monitor

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

FINGERPRINT_LENGTH = 12


def _json_number(value: float):
    # 1920.0 hashes like 1920.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def fingerprint(monitor: MonitorDescriptor) -> str:
    """Return a 12-hex-character identity for ``monitor``.

    Only the identifier, bounds width/height and scale factor contribute; the work
    area is excluded.
    """

    validate_monitor(monitor)
    identifier = monitor.identifier
    if identifier is None:
        raise InvalidMonitorError("Monitor descriptor has no identifier")
    info = {
        "id": _json_number(identifier) if isinstance(identifier, (int, float)) else identifier,
        "width": _json_number(monitor.bounds.width),
        "height": _json_number(monitor.bounds.height),
        "scaleFactor": _json_number(monitor.scale_factor),
    }
    encoded = json.dumps(info, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.md5(encoded.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]
    _LOGGER.debug("Fingerprint generated: %s for display %s", digest, identifier)
    return digest
