"""PyQt6 glue: QScreen -> MonitorDescriptor and screen signals -> reactor."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from PyQt6.QtCore import QRect
from PyQt6.QtGui import QGuiApplication, QScreen

from overlay_display.geometry import MonitorDescriptor, Rect
from overlay_display.hotplug import HotplugReactor

_LOGGER = logging.getLogger("OverlayDisplay.Placement")


def _rect_from_qrect(rect: QRect) -> Rect:
    return Rect(rect.x(), rect.y(), rect.width(), rect.height())


def screen_identifier(screen: QScreen) -> str:
    name = screen.name() or screen.manufacturer() or "unknown"
    try:
        serial = screen.serialNumber()
    except (AttributeError, RuntimeError) as exc:
        _LOGGER.debug("serialNumber unavailable for screen %s: %s", name, exc)
        serial = ""
    return f"{name}#{serial}" if serial else name


def describe_screen(screen: QScreen, primary: Optional[QScreen] = None) -> MonitorDescriptor:
    if primary is None:
        primary = QGuiApplication.primaryScreen()
    name = screen.name() or screen.manufacturer() or "unknown"
    try:
        device_ratio = float(screen.devicePixelRatio())
    except (AttributeError, RuntimeError, TypeError, ValueError) as exc:
        _LOGGER.debug("devicePixelRatio unavailable for screen %s; defaulting to 1.0 (%s)", name, exc)
        device_ratio = 1.0
    if device_ratio <= 0.0:
        device_ratio = 1.0
    return MonitorDescriptor(
        identifier=screen_identifier(screen),
        bounds=_rect_from_qrect(screen.geometry()),
        scale_factor=device_ratio,
        work_area=_rect_from_qrect(screen.availableGeometry()),
        is_primary=screen is primary,
        name=name,
    )


def qt_monitors() -> List[MonitorDescriptor]:
    primary = QGuiApplication.primaryScreen()
    return [describe_screen(screen, primary) for screen in QGuiApplication.screens()]


def widget_rect_fn(widget: Any) -> Callable[[], Optional[Rect]]:
    """Window-rect query backed by a QWidget's frame geometry."""

    def _current() -> Optional[Rect]:
        if widget is None:
            return None
        return _rect_from_qrect(widget.frameGeometry())

    return _current


class QtDisplayBridge:
    """Forwards QGuiApplication screen signals into a HotplugReactor."""

    def __init__(self, reactor: HotplugReactor, app: Optional[QGuiApplication] = None) -> None:
        self._reactor = reactor
        self._app = app if app is not None else QGuiApplication.instance()
        self._screen_connections: List[Tuple[QScreen, Any, Callable[..., None]]] = []
        self._connected = False

    def connect(self) -> None:
        if self._connected or self._app is None:
            return
        self._app.screenAdded.connect(self._on_screen_added)
        self._app.screenRemoved.connect(self._on_screen_removed)
        for screen in QGuiApplication.screens():
            self._watch_screen(screen)
        self._connected = True
        _LOGGER.info("Display listeners ready")

    def disconnect(self) -> None:
        if not self._connected or self._app is None:
            return
        self._app.screenAdded.disconnect(self._on_screen_added)
        self._app.screenRemoved.disconnect(self._on_screen_removed)
        for _screen, signal, slot in self._screen_connections:
            try:
                signal.disconnect(slot)
            except (RuntimeError, TypeError) as exc:
                _LOGGER.debug("Screen signal already disconnected: %s", exc)
        self._screen_connections.clear()
        self._connected = False

    def _watch_screen(self, screen: QScreen) -> None:
        for signal, field_name in (
            (screen.geometryChanged, "bounds"),
            (screen.availableGeometryChanged, "workArea"),
            (screen.logicalDotsPerInchChanged, "scaleFactor"),
        ):
            slot = self._metrics_slot(screen, field_name)
            signal.connect(slot)
            self._screen_connections.append((screen, signal, slot))

    def _unwatch_screen(self, screen: QScreen) -> None:
        remaining = []
        for watched, signal, slot in self._screen_connections:
            if watched is screen:
                try:
                    signal.disconnect(slot)
                except (RuntimeError, TypeError) as exc:
                    _LOGGER.debug("Screen signal already disconnected: %s", exc)
            else:
                remaining.append((watched, signal, slot))
        self._screen_connections = remaining

    def _metrics_slot(self, screen: QScreen, field_name: str) -> Callable[..., None]:
        def _slot(*_args: Any) -> None:
            try:
                self._reactor.on_metrics_changed(describe_screen(screen), (field_name,))
            except Exception:
                _LOGGER.exception("Display %s change for %s not applied", field_name, screen.name())

        return _slot

    def _on_screen_added(self, screen: QScreen) -> None:
        self._watch_screen(screen)
        try:
            self._reactor.on_added(describe_screen(screen))
        except Exception:
            _LOGGER.exception("Display added notice failed for %s", screen.name())

    def _on_screen_removed(self, screen: QScreen) -> None:
        self._unwatch_screen(screen)
        try:
            self._reactor.on_removed(describe_screen(screen))
        except Exception:
            _LOGGER.exception("Display removed notice failed for %s", screen.name())
