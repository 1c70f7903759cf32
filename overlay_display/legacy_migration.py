"""One-shot conversion of absolute window coordinates into a display profile.

Older configs stored ``windowX``/``windowY``/``windowWidth``/``windowHeight``.
Migration turns them into an anchor-relative offset on the monitor nearest that
position; an existing profile for the monitor always wins over legacy fields.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from overlay_display.bounds import inverse_offset
from overlay_display.fingerprint import fingerprint
from overlay_display.geometry import MonitorDescriptor, Rect, monitor_for_rect, primary_monitor
from overlay_display.profiles import DEFAULT_PROFILE, DisplayProfile, ProfileStore

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

LEGACY_POSITION_KEYS = ("windowX", "windowY")
LEGACY_SIZE_KEYS = ("windowWidth", "windowHeight")


@dataclass(frozen=True)
class MigrationResult:
    migrated: bool
    reason: str
    fingerprint: Optional[str] = None
    profile: Optional[DisplayProfile] = None

    @property
    def needs_clear_legacy_config(self) -> bool:
        return self.migrated


def _finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def has_legacy_position(legacy: Optional[Mapping[str, Any]]) -> bool:
    if not isinstance(legacy, Mapping):
        return False
    return any(_finite_number(legacy.get(key)) is not None for key in LEGACY_POSITION_KEYS)


def has_complete_legacy_position(legacy: Optional[Mapping[str, Any]]) -> bool:
    if not isinstance(legacy, Mapping):
        return False
    return all(_finite_number(legacy.get(key)) is not None for key in LEGACY_POSITION_KEYS)


def legacy_rect(legacy: Mapping[str, Any]) -> Rect:
    """Rectangle described by legacy fields; gaps filled from the default profile."""

    x = _finite_number(legacy.get("windowX"))
    y = _finite_number(legacy.get("windowY"))
    width = _finite_number(legacy.get("windowWidth"))
    height = _finite_number(legacy.get("windowHeight"))
    return Rect(
        x if x is not None else 0,
        y if y is not None else 0,
        width if width else DEFAULT_PROFILE.width,
        height if height else DEFAULT_PROFILE.height,
    )


def migrate_legacy_config(
    store: ProfileStore,
    monitors: Sequence[MonitorDescriptor],
    legacy: Optional[Mapping[str, Any]],
) -> MigrationResult:
    if not has_legacy_position(legacy):
        return MigrationResult(False, "no_legacy_position")
    assert legacy is not None

    rect = legacy_rect(legacy)
    if has_complete_legacy_position(legacy):
        monitor = monitor_for_rect(list(monitors), rect)
        monitor_fp = fingerprint(monitor)
        _LOGGER.info("Detected display from saved position: %s", monitor_fp)
    else:
        monitor = primary_monitor(list(monitors))
        monitor_fp = fingerprint(monitor)
        _LOGGER.info("Partial saved position; using primary display %s", monitor_fp)

    if store.has_valid_profile(monitor_fp):
        _LOGGER.info("Using existing profile for fingerprint %s; legacy position ignored", monitor_fp)
        return MigrationResult(False, "profile_exists", monitor_fp, store.get_if_exists(monitor_fp))

    _LOGGER.info("Migrating legacy window position %s to display %s", rect.as_tuple(), monitor_fp)
    profile = store.get_or_create(monitor_fp)
    offset_x, offset_y = inverse_offset(monitor, rect, profile.anchor)
    profile = store.update(
        monitor_fp,
        {
            "offset_x": offset_x,
            "offset_y": offset_y,
            "width": rect.width,
            "height": rect.height,
        },
    )
    return MigrationResult(True, "migrated", monitor_fp, profile)
