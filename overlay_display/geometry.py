"""Rectangle and monitor descriptor types shared by the placement engine.

Descriptors are produced by the host (Qt adapter, tests, other toolkits) and are
treated as read-only snapshots; nothing here caches them.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

Geometry = Tuple[int, int, int, int]


class InvalidMonitorError(ValueError):
    """Raised when the host hands over a monitor without usable geometry."""


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def as_tuple(self) -> Geometry:
        return (int(round(self.x)), int(round(self.y)), int(round(self.width)), int(round(self.height)))

    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contains_point(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height

    def contains_rect(self, other: "Rect") -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x + other.width <= self.x + self.width
            and other.y + other.height <= self.y + self.height
        )

    @classmethod
    def from_tuple(cls, value: Sequence[float]) -> "Rect":
        x, y, width, height = value
        return cls(x, y, width, height)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Rect":
        """Build a rect from a host dict (``{"x", "y", "width", "height"}``)."""

        try:
            return cls(
                float(data["x"]),
                float(data["y"]),
                float(data["width"]),
                float(data["height"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidMonitorError(f"Malformed rectangle {data!r}: {exc}") from exc


@dataclass(frozen=True)
class MonitorDescriptor:
    """Snapshot of one monitor as reported by the host toolkit."""

    identifier: Any
    bounds: Rect
    scale_factor: float
    work_area: Rect
    is_primary: bool = False
    name: str = ""

    def describe(self) -> str:
        label = self.name or str(self.identifier)
        return (
            f"{label} {int(self.bounds.width)}x{int(self.bounds.height)}"
            f"@({int(self.bounds.x)},{int(self.bounds.y)}) scale={self.scale_factor:g}"
        )


def _finite(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_monitor(monitor: Optional[MonitorDescriptor]) -> MonitorDescriptor:
    """Fail fast on descriptors that violate the host contract."""

    if monitor is None:
        raise InvalidMonitorError("Monitor descriptor is None")
    bounds = getattr(monitor, "bounds", None)
    work_area = getattr(monitor, "work_area", None)
    if bounds is None:
        raise InvalidMonitorError(f"Monitor {getattr(monitor, 'identifier', '?')!r} has no bounds")
    if work_area is None:
        raise InvalidMonitorError(f"Monitor {monitor.identifier!r} has no work area")
    for label, rect in (("bounds", bounds), ("work area", work_area)):
        if not all(_finite(v) for v in (rect.x, rect.y, rect.width, rect.height)):
            raise InvalidMonitorError(f"Monitor {monitor.identifier!r} has non-numeric {label}: {rect!r}")
    if not _finite(monitor.scale_factor):
        raise InvalidMonitorError(f"Monitor {monitor.identifier!r} has non-numeric scale factor")
    return monitor


def primary_monitor(monitors: Sequence[MonitorDescriptor]) -> MonitorDescriptor:
    if not monitors:
        raise InvalidMonitorError("Monitor enumeration is empty")
    for monitor in monitors:
        if monitor.is_primary:
            return monitor
    return monitors[0]


def _distance_sq_to_rect(px: float, py: float, rect: Rect) -> float:
    dx = max(rect.x - px, 0.0, px - (rect.x + rect.width))
    dy = max(rect.y - py, 0.0, py - (rect.y + rect.height))
    return dx * dx + dy * dy


def monitor_nearest_point(monitors: Sequence[MonitorDescriptor], px: float, py: float) -> MonitorDescriptor:
    """Monitor containing the point, otherwise the one with the closest bounds."""

    if not monitors:
        raise InvalidMonitorError("Monitor enumeration is empty")
    best: Optional[MonitorDescriptor] = None
    best_distance = math.inf
    for monitor in monitors:
        if monitor.bounds.contains_point(px, py):
            return monitor
        distance = _distance_sq_to_rect(px, py, monitor.bounds)
        if distance < best_distance:
            best_distance = distance
            best = monitor
    assert best is not None
    return best


def monitor_for_rect(monitors: Sequence[MonitorDescriptor], rect: Optional[Rect]) -> MonitorDescriptor:
    """Resolve the monitor for a window rect by its centre; primary when no rect."""

    if rect is None:
        return primary_monitor(monitors)
    cx, cy = rect.center()
    return monitor_nearest_point(monitors, cx, cy)
