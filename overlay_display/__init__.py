"""Per-monitor placement engine for the desktop overlay window.

The PyQt6 adapter lives in :mod:`overlay_display.qt_host` and is imported
explicitly by hosts so the geometry core stays importable without a display.
"""
from overlay_display.bounds import compute_bounds, inverse_offset, preview_offset, size_ratio
from overlay_display.fingerprint import fingerprint
from overlay_display.geometry import InvalidMonitorError, MonitorDescriptor, Rect
from overlay_display.host import PlacementSession, start_placement
from overlay_display.hotplug import HotplugReactor, ListenerRegistry, PlacementChange
from overlay_display.legacy_migration import MigrationResult, migrate_legacy_config
from overlay_display.placement_engine import DisplayInfo, DisplayPlacementEngine
from overlay_display.profiles import DEFAULT_PROFILE, Anchor, DisplayProfile, ProfileStore, SizeMode

__version__ = "0.1.0"

__all__ = [
    "Anchor",
    "DEFAULT_PROFILE",
    "DisplayInfo",
    "DisplayPlacementEngine",
    "DisplayProfile",
    "HotplugReactor",
    "InvalidMonitorError",
    "ListenerRegistry",
    "MigrationResult",
    "MonitorDescriptor",
    "PlacementChange",
    "PlacementSession",
    "ProfileStore",
    "Rect",
    "SizeMode",
    "compute_bounds",
    "fingerprint",
    "inverse_offset",
    "migrate_legacy_config",
    "preview_offset",
    "size_ratio",
    "start_placement",
    "__version__",
]
