"""Startup wiring between the host's config directory and the placement engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from overlay_display.debug_config import DEBUG_CONFIG_FILE, DebugConfig, load_debug_config
from overlay_display.geometry import Rect
from overlay_display.hotplug import MonitorsFn, WindowRectFn
from overlay_display.logging_utils import configure_logging, resolve_logs_dir
from overlay_display.placement_engine import DisplayPlacementEngine
from overlay_display.preferences import HostSettings

_LOGGER = logging.getLogger("OverlayDisplay.Placement")


@dataclass
class PlacementSession:
    """Everything a host needs after startup placement has run."""

    engine: DisplayPlacementEngine
    settings: HostSettings
    debug: DebugConfig
    log_dir: Path
    initial_rect: Rect
    migrated: bool = False

    def save(self) -> None:
        """Persist the engine's profiles into ``config.json``."""

        self.settings.display_profiles = self.engine.profiles_to_save()
        self.settings.save()


def start_placement(
    config_dir: Union[str, Path],
    monitors_fn: MonitorsFn,
    window_rect_fn: Optional[WindowRectFn] = None,
    *,
    log_dir: Optional[Path] = None,
) -> PlacementSession:
    """Load config, set up logging and compute the overlay's first rectangle.

    A legacy absolute position is migrated once; the legacy fields are then
    nulled and the migrated profile written back immediately.
    """

    config_dir = Path(config_dir)
    debug = load_debug_config(config_dir / DEBUG_CONFIG_FILE)
    resolved_log_dir = log_dir if log_dir is not None else resolve_logs_dir(config_dir)
    configure_logging(resolved_log_dir, verbose=debug.verbose_logging, retention=debug.log_retention)

    settings = HostSettings(config_dir)
    engine = DisplayPlacementEngine(monitors_fn, window_rect_fn)
    engine.load_profiles(settings.display_profiles)
    rect = engine.initial_bounds(settings.legacy_config())

    session = PlacementSession(
        engine=engine,
        settings=settings,
        debug=debug,
        log_dir=resolved_log_dir,
        initial_rect=rect,
        migrated=engine.needs_clear_legacy_config(),
    )
    if session.migrated:
        _LOGGER.info("Legacy window position migrated; clearing windowX/windowY in %s", settings.path)
        settings.clear_legacy_position()
        session.save()
    return session
