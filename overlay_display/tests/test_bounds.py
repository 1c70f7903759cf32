from __future__ import annotations

import itertools
from dataclasses import replace

import pytest

from overlay_display.bounds import (
    anchor_base_point,
    compute_bounds,
    inverse_offset,
    preview_offset,
    resolve_size,
    size_ratio,
)
from overlay_display.geometry import InvalidMonitorError, Rect
from overlay_display.profiles import DEFAULT_PROFILE, Anchor, DisplayProfile, SizeMode


def _fixed(anchor: str, offset_x: float, offset_y: float, width: int = 350, height: int = 600) -> DisplayProfile:
    return DisplayProfile(
        anchor=anchor,
        offset_x=offset_x,
        offset_y=offset_y,
        size_mode=SizeMode.FIXED,
        width=width,
        height=height,
    )


def test_bottom_right_default_lands_above_taskbar(laptop_monitor) -> None:
    rect = compute_bounds(laptop_monitor, _fixed(Anchor.BOTTOM_RIGHT, -20, -50))

    assert rect.as_tuple() == (1550, 390, 350, 600)


def test_top_left_offset_moves_inward(laptop_monitor) -> None:
    rect = compute_bounds(laptop_monitor, _fixed(Anchor.TOP_LEFT, 10, 10))

    assert rect.as_tuple() == (10, 10, 350, 600)


def test_default_profile_matches_bottom_right_scenario(laptop_monitor) -> None:
    assert compute_bounds(laptop_monitor, DEFAULT_PROFILE).as_tuple() == (1550, 390, 350, 600)


def test_top_right_and_bottom_left_use_anchor_named_edges(laptop_monitor) -> None:
    top_right = compute_bounds(laptop_monitor, _fixed(Anchor.TOP_RIGHT, -30, 15))
    bottom_left = compute_bounds(laptop_monitor, _fixed(Anchor.BOTTOM_LEFT, 25, -40))

    # Right edge sits 30px in from the work-area edge; top edge 15px down.
    assert top_right.as_tuple() == (1920 - 30 - 350, 15, 350, 600)
    # Left edge 25px in; bottom edge 40px above the work-area bottom.
    assert bottom_left.as_tuple() == (25, 1040 - 40 - 600, 350, 600)


def test_center_anchor_offsets_window_centre(laptop_monitor) -> None:
    rect = compute_bounds(laptop_monitor, _fixed(Anchor.CENTER, 100, -20, width=400, height=300))

    assert rect.as_tuple() == (960 + 100 - 200, 520 - 20 - 150, 400, 300)


def test_work_area_origin_is_respected_on_secondary_monitor(side_monitor) -> None:
    rect = compute_bounds(side_monitor, _fixed(Anchor.BOTTOM_RIGHT, -20, -50))

    assert rect.as_tuple() == (1920 + 2560 - 20 - 350, 1400 - 50 - 600, 350, 600)


def test_extreme_offsets_are_clamped_into_work_area(laptop_monitor) -> None:
    far_right = compute_bounds(laptop_monitor, _fixed(Anchor.TOP_LEFT, 5000, 5000))
    far_left = compute_bounds(laptop_monitor, _fixed(Anchor.BOTTOM_RIGHT, -5000, -5000))

    assert far_right.as_tuple() == (1920 - 350, 1040 - 600, 350, 600)
    assert far_left.as_tuple() == (0, 0, 350, 600)


def test_oversized_window_is_shrunk_to_work_area(make_monitor) -> None:
    small = make_monitor("small", (100, 50, 800, 600), (100, 50, 800, 560))

    rect = compute_bounds(small, _fixed(Anchor.CENTER, 0, 0, width=1200, height=900))

    assert rect.as_tuple() == (100, 50, 800, 560)


_WORK_AREAS = [
    ((-1280, 200, 1280, 1024), (-1280, 230, 1280, 960)),
    ((0, 0, 1001, 800), (0.5, 0, 1000, 799.6)),
    ((100, 50, 800, 600), (100, 50, 800, 560)),
]

_SCREEN_RELATIVE = [
    DisplayProfile(size_mode=SizeMode.SCREEN_RELATIVE),
    DisplayProfile(size_mode=SizeMode.SCREEN_RELATIVE, width_ratio=1.5, height_ratio=2.0, max_width=5000, max_height=5000),
    DisplayProfile(size_mode=SizeMode.SCREEN_RELATIVE, height_ratio=0.1, min_width=1300, min_height=900),
    DisplayProfile(size_mode=SizeMode.SCREEN_RELATIVE, width_ratio=0.33, height_ratio=0.71, max_width=250, max_height=333),
]


def _assert_contained(monitor, rect) -> None:
    assert monitor.work_area.contains_rect(rect)
    assert all(isinstance(value, int) for value in (rect.x, rect.y, rect.width, rect.height))


@pytest.mark.parametrize("geometry", _WORK_AREAS)
@pytest.mark.parametrize("anchor", Anchor.ALL)
@pytest.mark.parametrize("offset", [(-4000, -4000), (-20, -50), (0, 0), (37.5, 81.5), (4000, 4000)])
@pytest.mark.parametrize("size", [(350, 600), (1, 1), (1920, 1040), (350, 2000), (2500, 2000)])
def test_bounds_always_inside_work_area(make_monitor, geometry, anchor, offset, size) -> None:
    monitor = make_monitor("m", *geometry)
    profile = _fixed(anchor, offset[0], offset[1], width=size[0], height=size[1])

    _assert_contained(monitor, compute_bounds(monitor, profile))


@pytest.mark.parametrize("geometry", _WORK_AREAS)
@pytest.mark.parametrize("anchor", Anchor.ALL)
@pytest.mark.parametrize("base", _SCREEN_RELATIVE)
@pytest.mark.parametrize("offset", [(-4000, 4000), (-20, -50), (0, 0)])
def test_screen_relative_bounds_always_inside_work_area(make_monitor, geometry, anchor, base, offset) -> None:
    monitor = make_monitor("m", *geometry)
    profile = replace(base, anchor=anchor, offset_x=offset[0], offset_y=offset[1])

    _assert_contained(monitor, compute_bounds(monitor, profile))


def test_fractional_work_area_keeps_whole_pixels_inside(make_monitor) -> None:
    monitor = make_monitor("frac", (0, 0, 1001, 800), (0.5, 0, 1000, 799.6))

    rect = compute_bounds(monitor, _fixed(Anchor.BOTTOM_RIGHT, 0, 0, width=350, height=2000))

    assert rect.as_tuple() == (650, 0, 350, 799)
    assert monitor.work_area.contains_rect(rect)


def test_screen_relative_min_height_larger_than_work_area(make_monitor) -> None:
    small = make_monitor("small", (100, 50, 800, 600), (100, 50, 800, 560))
    profile = DisplayProfile(
        anchor=Anchor.TOP_LEFT,
        offset_x=0,
        offset_y=0,
        size_mode=SizeMode.SCREEN_RELATIVE,
        min_height=900,
    )

    rect = compute_bounds(small, profile)

    assert rect.height == 560
    assert rect.y == 50


def test_screen_relative_sizes_scale_with_work_area_and_clamp(laptop_monitor) -> None:
    profile = DisplayProfile(
        anchor=Anchor.TOP_LEFT,
        offset_x=0,
        offset_y=0,
        size_mode=SizeMode.SCREEN_RELATIVE,
        width_ratio=0.2,
        height_ratio=0.5,
        min_width=200,
        max_width=600,
        min_height=300,
        max_height=450,
    )

    rect = compute_bounds(laptop_monitor, profile)

    assert rect.width == 384  # 1920 * 0.2
    assert rect.height == 450  # 1040 * 0.5 = 520, capped by max_height


def test_screen_relative_min_limits_apply(make_monitor) -> None:
    tiny = make_monitor("tiny", (0, 0, 800, 600))
    profile = DisplayProfile(size_mode=SizeMode.SCREEN_RELATIVE, width_ratio=0.1, height_ratio=0.1)

    assert resolve_size(tiny.work_area, profile) == (200, 300)


def test_missing_fields_fall_back_per_field(laptop_monitor) -> None:
    profile = DisplayProfile(anchor=Anchor.TOP_LEFT, offset_x=10, offset_y=10)

    rect = compute_bounds(laptop_monitor, profile)

    assert rect.as_tuple() == (10, 10, DEFAULT_PROFILE.width, DEFAULT_PROFILE.height)


def test_unknown_anchor_is_treated_as_bottom_right(laptop_monitor) -> None:
    profile = _fixed("somewhere", -20, -50)

    assert compute_bounds(laptop_monitor, profile).as_tuple() == (1550, 390, 350, 600)


def test_anchor_base_points(laptop_monitor) -> None:
    work_area = laptop_monitor.work_area

    assert anchor_base_point(work_area, Anchor.TOP_LEFT) == (0, 0)
    assert anchor_base_point(work_area, Anchor.TOP_RIGHT) == (1920, 0)
    assert anchor_base_point(work_area, Anchor.BOTTOM_LEFT) == (0, 1040)
    assert anchor_base_point(work_area, Anchor.BOTTOM_RIGHT) == (1920, 1040)
    assert anchor_base_point(work_area, Anchor.CENTER) == (960, 520)


def test_inverse_offset_recovers_legacy_position(laptop_monitor) -> None:
    legacy = Rect(1500, 300, 300, 500)

    offset = inverse_offset(laptop_monitor, legacy, Anchor.BOTTOM_RIGHT)

    assert offset == (-120, -240)
    restored = compute_bounds(laptop_monitor, _fixed(Anchor.BOTTOM_RIGHT, *offset, width=300, height=500))
    assert restored.as_tuple() == (1500, 300, 300, 500)


@pytest.mark.parametrize(
    "anchor, rect",
    list(
        itertools.product(
            Anchor.ALL,
            [Rect(0, 0, 350, 600), Rect(1570, 440, 350, 600), Rect(812, 233, 301, 457), Rect(40, 700, 640, 300)],
        )
    ),
)
def test_inverse_offset_round_trips_through_compute_bounds(laptop_monitor, anchor, rect) -> None:
    offset_x, offset_y = inverse_offset(laptop_monitor, rect, anchor)
    profile = _fixed(anchor, offset_x, offset_y, width=int(rect.width), height=int(rect.height))

    restored = compute_bounds(laptop_monitor, profile)

    assert abs(restored.x - rect.x) <= 1
    assert abs(restored.y - rect.y) <= 1
    assert (restored.width, restored.height) == (rect.width, rect.height)


def test_size_ratio_uses_work_area(laptop_monitor) -> None:
    width_ratio, height_ratio = size_ratio(laptop_monitor, Rect(0, 0, 480, 520))

    assert width_ratio == pytest.approx(0.25)
    assert height_ratio == pytest.approx(0.5)


def test_size_ratio_rejects_empty_work_area(make_monitor) -> None:
    broken = make_monitor("broken", (0, 0, 1920, 1080), (0, 0, 0, 0))

    with pytest.raises(InvalidMonitorError):
        size_ratio(broken, Rect(0, 0, 10, 10))


def test_compute_bounds_fails_fast_on_missing_monitor() -> None:
    with pytest.raises(InvalidMonitorError):
        compute_bounds(None, DEFAULT_PROFILE)  # type: ignore[arg-type]


def test_preview_offset_clamps_for_display_only() -> None:
    assert preview_offset(-120, 240) == (-50, 50)
    assert preview_offset(10, -5) == (10, -5)
    assert preview_offset(80, -80, limit=60) == (60, -60)
