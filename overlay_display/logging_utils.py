from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER_NAME = "OverlayDisplay"
LOG_DIR_ENV_VAR = "OVERLAY_DISPLAY_LOG_DIR"
LOG_FILENAME = "overlay-display.log"
_HANDLER_MARKER = "_overlay_display_handler"


def resolve_logs_dir(base_path: Path, log_dir_name: str = "OverlayDisplay") -> Path:
    """
    Resolve the directory for placement-engine logs.

    Strategy:
    - Use OVERLAY_DISPLAY_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `<base_path>/logs`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home)
    candidates.append(cache_home)
    candidates.append(base_path.resolve() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = LOG_FILENAME,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler; ``retention`` counts the live file."""
    retention = max(1, retention)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=max(0, retention - 1),
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(verbose: bool) -> int:
    return logging.DEBUG if verbose else logging.INFO


def configure_logging(log_dir: Path, *, verbose: bool = False, retention: int = 5) -> logging.Logger:
    """Attach a rotating file handler to the package logger once.

    Repeat calls only adjust the level so hosts can toggle verbose tracing live.
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(resolve_log_level(verbose))
    if any(getattr(handler, _HANDLER_MARKER, False) for handler in logger.handlers):
        return logger
    handler = build_rotating_file_handler(
        log_dir,
        retention=retention,
        formatter=logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"),
    )
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    return logger
