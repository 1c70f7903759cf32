"""React to monitor attach/detach and metric changes reported by the host."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from overlay_display.bounds import compute_bounds
from overlay_display.fingerprint import fingerprint
from overlay_display.geometry import MonitorDescriptor, Rect, monitor_for_rect
from overlay_display.profiles import ProfileStore

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

EVENT_PLACEMENT_CHANGED = "placement-changed"
EVENT_DISPLAY_ADDED = "display-added"
EVENT_DISPLAY_REMOVED = "display-removed"

Listener = Callable[[str, Any], None]
MonitorsFn = Callable[[], Sequence[MonitorDescriptor]]
WindowRectFn = Callable[[], Optional[Rect]]


@dataclass(frozen=True)
class PlacementChange:
    old_rect: Optional[Rect]
    new_rect: Rect
    monitor: MonitorDescriptor
    fingerprint: str
    changed_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DisplayNotice:
    monitor: MonitorDescriptor
    fingerprint: Optional[str]


class ListenerRegistry:
    """Unordered fan-out of ``(event, payload)`` to subscribed callbacks."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, callback: Listener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove(self, callback: Listener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def notify(self, event: str, payload: Any) -> int:
        """Deliver to every listener; returns how many raised."""

        failures = 0
        for callback in list(self._listeners):
            try:
                callback(event, payload)
            except Exception:
                failures += 1
                _LOGGER.exception("Display listener %r failed for %s", callback, event)
        return failures


class HotplugReactor:
    """Recomputes the active window's placement when display metrics change."""

    def __init__(
        self,
        store: ProfileStore,
        monitors_fn: MonitorsFn,
        window_rect_fn: Optional[WindowRectFn] = None,
    ) -> None:
        self._store = store
        self._monitors_fn = monitors_fn
        self._window_rect_fn = window_rect_fn
        self._listeners = ListenerRegistry()

    @property
    def listeners(self) -> ListenerRegistry:
        return self._listeners

    def set_window_rect_fn(self, fn: Optional[WindowRectFn]) -> None:
        self._window_rect_fn = fn

    def add_listener(self, callback: Listener) -> None:
        self._listeners.add(callback)

    def remove_listener(self, callback: Listener) -> None:
        self._listeners.remove(callback)

    def _current_window_rect(self) -> Optional[Rect]:
        if self._window_rect_fn is None:
            return None
        return self._window_rect_fn()

    def on_metrics_changed(
        self,
        monitor: MonitorDescriptor,
        changed_fields: Sequence[str] = (),
    ) -> PlacementChange:
        changed = tuple(changed_fields)
        _LOGGER.info(
            "Display changed: %s | %s",
            ", ".join(changed) if changed else "metrics",
            monitor.describe(),
        )
        # The window's own monitor is resolved afresh; it may not be the one that changed.
        old_rect = self._current_window_rect()
        target = monitor_for_rect(list(self._monitors_fn()), old_rect)
        target_fp = fingerprint(target)
        profile = self._store.get_or_create(target_fp)
        new_rect = compute_bounds(target, profile)
        change = PlacementChange(
            old_rect=old_rect,
            new_rect=new_rect,
            monitor=target,
            fingerprint=target_fp,
            changed_fields=changed,
        )
        self._listeners.notify(EVENT_PLACEMENT_CHANGED, change)
        return change

    def _notice(self, monitor: MonitorDescriptor) -> DisplayNotice:
        try:
            monitor_fp: Optional[str] = fingerprint(monitor)
        except ValueError as exc:
            _LOGGER.debug("Display notice without fingerprint: %s", exc)
            monitor_fp = None
        return DisplayNotice(monitor=monitor, fingerprint=monitor_fp)

    def on_added(self, monitor: MonitorDescriptor) -> DisplayNotice:
        _LOGGER.info("Display added: %s", monitor.describe())
        notice = self._notice(monitor)
        self._listeners.notify(EVENT_DISPLAY_ADDED, notice)
        return notice

    def on_removed(self, monitor: MonitorDescriptor) -> DisplayNotice:
        _LOGGER.info("Display removed: %s", monitor.describe())
        notice = self._notice(monitor)
        self._listeners.notify(EVENT_DISPLAY_REMOVED, notice)
        return notice
