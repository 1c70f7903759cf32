import logging
import os
from typing import Callable, Optional, Tuple

import pytest

from overlay_display.geometry import MonitorDescriptor, Rect
from overlay_display.logging_utils import PACKAGE_LOGGER_NAME


def pytest_runtest_setup(item):
    if item.get_closest_marker("pyqt_required"):
        if not os.getenv("PYQT_TESTS"):
            pytest.skip("PYQT_TESTS not set; skipping PyQt-dependent test")


def build_monitor(
    identifier,
    bounds: Tuple[int, int, int, int],
    work_area: Optional[Tuple[int, int, int, int]] = None,
    *,
    scale: float = 1.0,
    primary: bool = False,
    name: str = "",
) -> MonitorDescriptor:
    return MonitorDescriptor(
        identifier=identifier,
        bounds=Rect.from_tuple(bounds),
        scale_factor=scale,
        work_area=Rect.from_tuple(work_area if work_area is not None else bounds),
        is_primary=primary,
        name=name,
    )


@pytest.fixture
def make_monitor() -> Callable[..., MonitorDescriptor]:
    return build_monitor


@pytest.fixture
def laptop_monitor() -> MonitorDescriptor:
    # 1920x1080 panel with a 40px taskbar along the bottom.
    return build_monitor(1, (0, 0, 1920, 1080), (0, 0, 1920, 1040), primary=True, name="eDP-1")


@pytest.fixture
def side_monitor() -> MonitorDescriptor:
    return build_monitor(2, (1920, 0, 2560, 1440), (1920, 0, 2560, 1400), scale=1.25, name="DP-2")


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    original_level = logger.level
    original_handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in original_handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(original_level)
