"""JSON-backed host settings holding display profiles and legacy window fields."""
from __future__ import annotations

import copy
import json
import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

SETTINGS_FILE = "config.json"
DEFAULT_WINDOW_WIDTH = 350
DEFAULT_WINDOW_HEIGHT = 600
MIN_WINDOW_SIZE = 200

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

_KNOWN_KEYS = ("windowWidth", "windowHeight", "windowX", "windowY", "displayProfiles")


def _optional_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value) if float(value).is_integer() else value


@dataclass
class HostSettings:
    """Host config file (``config.json``) as consumed by the placement engine.

    Only the window and profile keys are modelled; every other key (model path,
    opacity, ...) is kept in ``extra`` and written back untouched.
    """

    config_dir: Path
    window_width: int = DEFAULT_WINDOW_WIDTH
    window_height: int = DEFAULT_WINDOW_HEIGHT
    window_x: Optional[float] = None
    window_y: Optional[float] = None
    display_profiles: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        self._path = self.config_dir / SETTINGS_FILE
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    # Persistence ---------------------------------------------------------

    def _load(self) -> None:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.warning("Failed to load settings %s: %s", self._path, exc)
            return
        if not isinstance(data, dict):
            _LOGGER.warning("Ignoring settings %s: top level is not an object", self._path)
            return
        width = _optional_number(data.get("windowWidth"))
        height = _optional_number(data.get("windowHeight"))
        self.window_width = max(MIN_WINDOW_SIZE, int(width)) if width else DEFAULT_WINDOW_WIDTH
        self.window_height = max(MIN_WINDOW_SIZE, int(height)) if height else DEFAULT_WINDOW_HEIGHT
        self.window_x = _optional_number(data.get("windowX"))
        self.window_y = _optional_number(data.get("windowY"))
        profiles = data.get("displayProfiles")
        self.display_profiles = copy.deepcopy(profiles) if isinstance(profiles, dict) else {}
        self.extra = {key: copy.deepcopy(value) for key, value in data.items() if key not in _KNOWN_KEYS}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = copy.deepcopy(self.extra)
        payload.update(
            {
                "windowWidth": int(self.window_width),
                "windowHeight": int(self.window_height),
                "windowX": self.window_x,
                "windowY": self.window_y,
                "displayProfiles": copy.deepcopy(self.display_profiles),
            }
        )
        return payload

    def save(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    # Legacy fields -------------------------------------------------------

    def legacy_config(self) -> Dict[str, Any]:
        return {
            "windowX": self.window_x,
            "windowY": self.window_y,
            "windowWidth": self.window_width,
            "windowHeight": self.window_height,
        }

    def clear_legacy_position(self) -> None:
        self.window_x = None
        self.window_y = None
