"""Host-facing facade over fingerprinting, profiles, bounds and migration.

The host supplies two callables: one returning the current monitor enumeration
and one returning the overlay window's current rectangle. Every method is
synchronous; the host applies the returned rectangles to its real window.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from overlay_display.bounds import compute_bounds, inverse_offset, size_ratio
from overlay_display.fingerprint import fingerprint
from overlay_display.geometry import (
    InvalidMonitorError,
    MonitorDescriptor,
    Rect,
    monitor_for_rect,
    primary_monitor,
)
from overlay_display.hotplug import HotplugReactor, MonitorsFn, WindowRectFn
from overlay_display.legacy_migration import MigrationResult, migrate_legacy_config
from overlay_display.profiles import Anchor, DisplayProfile, ProfileStore

_LOGGER = logging.getLogger("OverlayDisplay.Placement")


@dataclass(frozen=True)
class DisplayInfo:
    monitor: MonitorDescriptor
    fingerprint: str
    logical_width: int
    logical_height: int
    physical_width: int
    physical_height: int
    is_primary: bool

    @classmethod
    def for_monitor(cls, monitor: MonitorDescriptor) -> "DisplayInfo":
        return cls(
            monitor=monitor,
            fingerprint=fingerprint(monitor),
            logical_width=int(round(monitor.work_area.width)),
            logical_height=int(round(monitor.work_area.height)),
            physical_width=int(round(monitor.bounds.width * monitor.scale_factor)),
            physical_height=int(round(monitor.bounds.height * monitor.scale_factor)),
            is_primary=bool(monitor.is_primary),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.monitor.identifier,
            "name": self.monitor.name,
            "fingerprint": self.fingerprint,
            "logicalWidth": self.logical_width,
            "logicalHeight": self.logical_height,
            "physicalWidth": self.physical_width,
            "physicalHeight": self.physical_height,
            "scaleFactor": self.monitor.scale_factor,
            "bounds": _rect_dict(self.monitor.bounds),
            "workArea": _rect_dict(self.monitor.work_area),
            "isPrimary": self.is_primary,
        }


def _rect_dict(rect: Rect) -> Dict[str, int]:
    x, y, width, height = rect.as_tuple()
    return {"x": x, "y": y, "width": width, "height": height}


class DisplayPlacementEngine:
    def __init__(
        self,
        monitors_fn: MonitorsFn,
        window_rect_fn: Optional[WindowRectFn] = None,
        store: Optional[ProfileStore] = None,
    ) -> None:
        self._monitors_fn = monitors_fn
        self._window_rect_fn = window_rect_fn
        self.store = store if store is not None else ProfileStore()
        self.store.set_primary_fingerprint_fn(self._primary_fingerprint)
        self.reactor = HotplugReactor(self.store, monitors_fn, window_rect_fn)
        self._needs_clear_legacy_config = False
        self.last_migration: Optional[MigrationResult] = None

    # Enumeration ---------------------------------------------------------

    def _monitors(self) -> List[MonitorDescriptor]:
        monitors = list(self._monitors_fn())
        if not monitors:
            raise InvalidMonitorError("Host reported no monitors")
        return monitors

    def _primary_fingerprint(self) -> Optional[str]:
        monitors = list(self._monitors_fn())
        if not monitors:
            return None
        return fingerprint(primary_monitor(monitors))

    def all_displays(self) -> List[DisplayInfo]:
        return [DisplayInfo.for_monitor(monitor) for monitor in self._monitors()]

    def display_info(self, rect: Optional[Rect] = None) -> DisplayInfo:
        info = DisplayInfo.for_monitor(monitor_for_rect(self._monitors(), rect))
        _LOGGER.info(
            "Display: %s | %dx%d @ %d%%",
            info.fingerprint,
            info.logical_width,
            info.logical_height,
            int(round(info.monitor.scale_factor * 100)),
        )
        _LOGGER.debug(
            "  Physical: %dx%d Work Area: %s",
            info.physical_width,
            info.physical_height,
            info.monitor.work_area.as_tuple(),
        )
        return info

    def display_at(self, x: float, y: float) -> DisplayInfo:
        return self.display_info(Rect(x, y, 1, 1))

    def _find_monitor(self, target_fp: str) -> Optional[MonitorDescriptor]:
        for monitor in self._monitors():
            if fingerprint(monitor) == target_fp:
                return monitor
        return None

    # Profiles ------------------------------------------------------------

    def load_profiles(self, collection: Any) -> None:
        self.store.load(collection)

    def profiles_to_save(self) -> Dict[str, Dict[str, Any]]:
        return self.store.export()

    def needs_clear_legacy_config(self) -> bool:
        return self._needs_clear_legacy_config

    # Placement -----------------------------------------------------------

    def initial_bounds(self, saved_config: Optional[Mapping[str, Any]] = None) -> Rect:
        """Startup placement; migrates legacy absolute coordinates once."""

        monitors = self._monitors()
        result = migrate_legacy_config(self.store, monitors, saved_config)
        self.last_migration = result
        if result.migrated:
            self._needs_clear_legacy_config = True
        if result.fingerprint is not None:
            monitor = self._find_monitor(result.fingerprint)
            if monitor is not None:
                return compute_bounds(monitor, self.store.get_or_create(result.fingerprint))
        info = self.display_info()
        _LOGGER.info("Using profile for primary display %s", info.fingerprint)
        return compute_bounds(info.monitor, self.store.get_or_create(info.fingerprint))

    def recalculate_bounds(self, current_rect: Optional[Rect] = None) -> Rect:
        if current_rect is None and self._window_rect_fn is not None:
            current_rect = self._window_rect_fn()
        info = self.display_info(current_rect)
        return compute_bounds(info.monitor, self.store.get_or_create(info.fingerprint))

    def bounds_for_display(self, target_fp: str) -> Optional[Rect]:
        monitor = self._find_monitor(target_fp)
        if monitor is None:
            _LOGGER.info("Target display not found: %s", target_fp)
            return None
        _LOGGER.info(
            "Moving to display: %s (%dx%d)",
            target_fp,
            int(monitor.work_area.width),
            int(monitor.work_area.height),
        )
        return compute_bounds(monitor, self.store.get_or_create(target_fp))

    def move_to_display(self, target_fp: str, current_rect: Optional[Rect] = None) -> Rect:
        rect = self.bounds_for_display(target_fp)
        if rect is None:
            return self.recalculate_bounds(current_rect)
        return rect

    def preview_profile(self, target_fp: str) -> Optional[DisplayProfile]:
        """Read-only lookup for settings previews; never creates a profile."""

        return self.store.get_if_exists(target_fp)

    # User-driven updates -------------------------------------------------

    def handle_move_end(self, rect: Rect) -> DisplayProfile:
        info = self.display_info(rect)
        profile = self.store.get_or_create(info.fingerprint)
        offset_x, offset_y = inverse_offset(info.monitor, rect, profile.anchor)
        return self.store.update(
            info.fingerprint,
            {"offset_x": offset_x, "offset_y": offset_y, "width": rect.width, "height": rect.height},
        )

    def handle_resize_end(self, rect: Rect) -> DisplayProfile:
        info = self.display_info(rect)
        profile = self.store.get_or_create(info.fingerprint)
        width_ratio, height_ratio = size_ratio(info.monitor, rect)
        offset_x, offset_y = inverse_offset(info.monitor, rect, profile.anchor)
        return self.store.update(
            info.fingerprint,
            {
                "offset_x": offset_x,
                "offset_y": offset_y,
                "width": rect.width,
                "height": rect.height,
                "width_ratio": width_ratio,
                "height_ratio": height_ratio,
            },
        )

    def apply_display_settings(self, settings: Mapping[str, Any]) -> Optional[Rect]:
        """Apply ``{fingerprint?, anchor?, offsetX?, offsetY?}`` from the settings form.

        Returns the new rectangle when the target monitor is attached.
        """

        target_fp = settings.get("fingerprint")
        if not isinstance(target_fp, str) or not target_fp:
            target_fp = self.display_info(self._window_rect_fn() if self._window_rect_fn else None).fingerprint
        updates: Dict[str, Any] = {}
        anchor = settings.get("anchor")
        if isinstance(anchor, str) and anchor.strip().lower() in Anchor.ALL:
            updates["anchor"] = anchor.strip().lower()
        elif anchor is not None:
            _LOGGER.warning("Ignoring unknown anchor %r for display %s", anchor, target_fp)
        for key in ("offsetX", "offsetY"):
            value = settings.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
                updates[key] = value
        self.store.update(target_fp, updates)
        return self.bounds_for_display(target_fp)


def monitors_from_sequence(monitors: Sequence[MonitorDescriptor]) -> MonitorsFn:
    """Wrap a fixed enumeration as a monitor provider (tests, headless hosts)."""

    snapshot = list(monitors)
    return lambda: list(snapshot)
