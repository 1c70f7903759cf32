"""Anchor-relative window bounds and their inverse.

All functions are pure: they take a monitor descriptor plus a profile (or an
observed rectangle) and return integer geometry. Coordinates are in the host's
logical units, relative to the virtual desktop.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from overlay_display.geometry import InvalidMonitorError, MonitorDescriptor, Rect, validate_monitor
from overlay_display.profiles import DEFAULT_PROFILE, Anchor, DisplayProfile, SizeMode

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

PREVIEW_OFFSET_LIMIT = 50

_RIGHT_ANCHORS = {Anchor.TOP_RIGHT, Anchor.BOTTOM_RIGHT}
_BOTTOM_ANCHORS = {Anchor.BOTTOM_LEFT, Anchor.BOTTOM_RIGHT}


def _round(value: float) -> int:
    # Half-up, not banker's rounding.
    return int(math.floor(value + 0.5))


def _positive(value: Optional[float], fallback: float) -> float:
    if value is None or value <= 0:
        return fallback
    return value


def _normalise_anchor(anchor: Optional[str]) -> str:
    return anchor if anchor in Anchor.ALL else Anchor.BOTTOM_RIGHT


def anchor_base_point(work_area: Rect, anchor: Optional[str]) -> Tuple[float, float]:
    anchor = _normalise_anchor(anchor)
    if anchor == Anchor.CENTER:
        return (work_area.x + work_area.width / 2.0, work_area.y + work_area.height / 2.0)
    base_x = work_area.x + work_area.width if anchor in _RIGHT_ANCHORS else work_area.x
    base_y = work_area.y + work_area.height if anchor in _BOTTOM_ANCHORS else work_area.y
    return (base_x, base_y)


def resolve_size(work_area: Rect, profile: DisplayProfile) -> Tuple[int, int]:
    """Window size for ``profile`` on a work area, before containment."""

    if profile.size_mode == SizeMode.SCREEN_RELATIVE:
        width_ratio = _positive(profile.width_ratio, DEFAULT_PROFILE.width_ratio)
        height_ratio = _positive(profile.height_ratio, DEFAULT_PROFILE.height_ratio)
        min_width = _positive(profile.min_width, DEFAULT_PROFILE.min_width)
        max_width = _positive(profile.max_width, DEFAULT_PROFILE.max_width)
        min_height = _positive(profile.min_height, DEFAULT_PROFILE.min_height)
        max_height = _positive(profile.max_height, DEFAULT_PROFILE.max_height)
        width = max(min_width, min(max_width, work_area.width * width_ratio))
        height = max(min_height, min(max_height, work_area.height * height_ratio))
    else:
        width = _positive(profile.width, DEFAULT_PROFILE.width)
        height = _positive(profile.height, DEFAULT_PROFILE.height)
    return _round(width), _round(height)


def compute_bounds(monitor: MonitorDescriptor, profile: DisplayProfile) -> Rect:
    """Place a window on ``monitor`` according to ``profile``.

    The anchor-named edge of the window touches ``base + offset``: for right
    anchors ``offset_x`` moves the right edge, for bottom anchors ``offset_y``
    moves the bottom edge, and ``center`` offsets the window centre. The result is
    clamped so the rectangle never leaves the work area; a window larger than the
    work area is shrunk to fit.
    """

    validate_monitor(monitor)
    work_area = monitor.work_area
    anchor = _normalise_anchor(profile.anchor)

    # Whole-pixel span that lies inside a possibly fractional work area.
    left = int(math.ceil(work_area.x))
    top = int(math.ceil(work_area.y))
    right = int(math.floor(work_area.x + work_area.width))
    bottom = int(math.floor(work_area.y + work_area.height))

    width, height = resolve_size(work_area, profile)
    width = min(width, max(0, right - left))
    height = min(height, max(0, bottom - top))

    base_x, base_y = anchor_base_point(work_area, anchor)
    offset_x = profile.offset_x if profile.offset_x is not None else DEFAULT_PROFILE.offset_x
    offset_y = profile.offset_y if profile.offset_y is not None else DEFAULT_PROFILE.offset_y

    final_x = base_x + offset_x
    final_y = base_y + offset_y
    if anchor == Anchor.CENTER:
        final_x -= width / 2.0
        final_y -= height / 2.0
    else:
        if anchor in _RIGHT_ANCHORS:
            final_x -= width
        if anchor in _BOTTOM_ANCHORS:
            final_y -= height

    final_x = max(left, min(right - width, _round(final_x)))
    final_y = max(top, min(bottom - height, _round(final_y)))

    result = Rect(final_x, final_y, width, height)
    _LOGGER.debug(
        "Bounds: %s + (%s,%s) => (%d,%d) %dx%d",
        anchor,
        offset_x,
        offset_y,
        result.x,
        result.y,
        width,
        height,
    )
    return result


def inverse_offset(monitor: MonitorDescriptor, rect: Rect, anchor: Optional[str]) -> Tuple[int, int]:
    """Recover the ``(offset_x, offset_y)`` that places a window at ``rect``."""

    validate_monitor(monitor)
    anchor = _normalise_anchor(anchor)
    base_x, base_y = anchor_base_point(monitor.work_area, anchor)
    if anchor == Anchor.CENTER:
        edge_x = rect.x + rect.width / 2.0
        edge_y = rect.y + rect.height / 2.0
    else:
        edge_x = rect.x + rect.width if anchor in _RIGHT_ANCHORS else rect.x
        edge_y = rect.y + rect.height if anchor in _BOTTOM_ANCHORS else rect.y
    offset = (_round(edge_x - base_x), _round(edge_y - base_y))
    _LOGGER.debug("Offset from position: %s anchor=%s", offset, anchor)
    return offset


def size_ratio(monitor: MonitorDescriptor, rect: Rect) -> Tuple[float, float]:
    """Window size as a fraction of the work area."""

    validate_monitor(monitor)
    work_area = monitor.work_area
    if work_area.width <= 0 or work_area.height <= 0:
        raise InvalidMonitorError(f"Monitor {monitor.identifier!r} has an empty work area")
    ratios = (rect.width / float(work_area.width), rect.height / float(work_area.height))
    _LOGGER.debug("Size ratio: width=%.4f height=%.4f", ratios[0], ratios[1])
    return ratios


def preview_offset(offset_x: float, offset_y: float, limit: int = PREVIEW_OFFSET_LIMIT) -> Tuple[float, float]:
    """Clamp offsets for a settings-panel preview only; never persisted."""

    limit = abs(limit)
    return (max(-limit, min(limit, offset_x)), max(-limit, min(limit, offset_y)))
