"""Debug configuration loader for placement tracing."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

DEBUG_CONFIG_FILE = "debug.json"
LOG_RETENTION_MIN = 1
LOG_RETENTION_MAX = 20
LOG_RETENTION_DEFAULT = 5

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

_DEFAULTS = {
    "verbose_logging": False,
    "log_retention": LOG_RETENTION_DEFAULT,
}


@dataclass(frozen=True)
class DebugConfig:
    verbose_logging: bool = False
    log_retention: int = LOG_RETENTION_DEFAULT


def _coerce_log_retention(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return None
    if numeric < LOG_RETENTION_MIN:
        return LOG_RETENTION_MIN
    if numeric > LOG_RETENTION_MAX:
        return LOG_RETENTION_MAX
    return numeric


def load_debug_config(path: Path) -> DebugConfig:
    """Read ``debug.json``; missing keys are filled in and written back."""

    needs_write = False
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        loaded = deepcopy(_DEFAULTS)
        needs_write = True
    except (OSError, json.JSONDecodeError) as exc:
        _LOGGER.warning("Unreadable debug config %s (%s); using defaults", path, exc)
        loaded = deepcopy(_DEFAULTS)
        needs_write = True

    data: dict[str, Any] = deepcopy(loaded) if isinstance(loaded, dict) else {}
    if not isinstance(loaded, dict):
        needs_write = True
    for key, default_value in _DEFAULTS.items():
        if key not in data:
            data[key] = default_value
            needs_write = True

    retention = _coerce_log_retention(data.get("log_retention"))
    config = DebugConfig(
        verbose_logging=bool(data.get("verbose_logging", False)),
        log_retention=retention if retention is not None else LOG_RETENTION_DEFAULT,
    )

    if needs_write:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            _LOGGER.debug("Failed to write debug config %s: %s", path, exc)

    return config
