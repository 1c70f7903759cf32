"""Per-monitor placement profiles and the store that owns them."""
from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

_LOGGER = logging.getLogger("OverlayDisplay.Placement")

PROFILE_VERSION = 1


class Anchor:
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"
    CENTER = "center"

    ALL = (TOP_LEFT, TOP_RIGHT, BOTTOM_LEFT, BOTTOM_RIGHT, CENTER)


class SizeMode:
    FIXED = "fixed"
    SCREEN_RELATIVE = "screen_relative"

    ALL = (FIXED, SCREEN_RELATIVE)


# attribute name -> persisted key
_PERSISTED_KEYS: Dict[str, str] = {
    "anchor": "anchor",
    "offset_x": "offsetX",
    "offset_y": "offsetY",
    "size_mode": "sizeMode",
    "width": "width",
    "height": "height",
    "width_ratio": "widthRatio",
    "height_ratio": "heightRatio",
    "min_width": "minWidth",
    "max_width": "maxWidth",
    "min_height": "minHeight",
    "max_height": "maxHeight",
}
_ATTRIBUTE_FOR_KEY: Dict[str, str] = {}
for _attr, _key in _PERSISTED_KEYS.items():
    _ATTRIBUTE_FOR_KEY[_key] = _attr
    _ATTRIBUTE_FOR_KEY[_attr] = _attr


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        numeric = value
    elif isinstance(value, str):
        try:
            numeric = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(numeric):
        return None
    if isinstance(numeric, float) and numeric.is_integer():
        return int(numeric)
    return numeric


def _coerce_choice(value: Any, choices) -> Optional[str]:
    if not isinstance(value, str):
        return None
    token = value.strip().lower()
    return token if token in choices else None


@dataclass(frozen=True)
class DisplayProfile:
    """Placement preference for one monitor fingerprint.

    Every placement field is optional; ``None`` means "unset" and the bounds
    calculator falls back to the default for that field only. Keys the engine does
    not know about are carried in ``extra`` and written back untouched.
    """

    anchor: Optional[str] = None
    offset_x: Optional[float] = None
    offset_y: Optional[float] = None
    size_mode: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    width_ratio: Optional[float] = None
    height_ratio: Optional[float] = None
    min_width: Optional[float] = None
    max_width: Optional[float] = None
    min_height: Optional[float] = None
    max_height: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DisplayProfile":
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, raw in data.items():
            attr = _ATTRIBUTE_FOR_KEY.get(key)
            if attr is None:
                if key != "version":
                    extra[key] = copy.deepcopy(raw)
                continue
            values[attr] = _coerce_field(attr, raw)
        return cls(extra=extra, **values)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = copy.deepcopy(self.extra)
        for attr, key in _PERSISTED_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        payload["version"] = PROFILE_VERSION
        return payload

    def has_finite_offsets(self) -> bool:
        return self.offset_x is not None and self.offset_y is not None


def _coerce_field(attr: str, raw: Any) -> Any:
    if attr == "anchor":
        return _coerce_choice(raw, Anchor.ALL)
    if attr == "size_mode":
        return _coerce_choice(raw, SizeMode.ALL)
    return _coerce_number(raw)


DEFAULT_PROFILE = DisplayProfile(
    anchor=Anchor.BOTTOM_RIGHT,
    offset_x=-20,
    offset_y=-50,
    size_mode=SizeMode.FIXED,
    width=350,
    height=600,
    width_ratio=0.15,
    height_ratio=0.35,
    min_width=200,
    max_width=600,
    min_height=300,
    max_height=900,
)


def merge_profile(profile: DisplayProfile, updates: Mapping[str, Any]) -> DisplayProfile:
    """Return ``profile`` with ``updates`` applied field by field.

    ``updates`` may use attribute names (``offset_x``) or persisted keys
    (``offsetX``). ``None`` values leave the field untouched. Unknown keys raise
    ``KeyError``; invalid anchor/size-mode values raise ``ValueError``.
    """

    changes: Dict[str, Any] = {}
    for key, raw in updates.items():
        attr = _ATTRIBUTE_FOR_KEY.get(key)
        if attr is None:
            raise KeyError(f"Unknown profile field: {key}")
        if raw is None:
            continue
        value = _coerce_field(attr, raw)
        if value is None:
            raise ValueError(f"Invalid value for profile field {key}: {raw!r}")
        changes[attr] = value
    if not changes:
        return profile
    return replace(profile, extra=copy.deepcopy(profile.extra), **changes)


class ProfileStore:
    """Fingerprint -> DisplayProfile mapping with primary-monitor inheritance.

    ``primary_fingerprint_fn`` returns the fingerprint of the current primary
    monitor (or ``None`` when unknown); it is consulted when an unseen fingerprint
    is first requested.
    """

    def __init__(self, primary_fingerprint_fn: Optional[Callable[[], Optional[str]]] = None) -> None:
        self._profiles: Dict[str, DisplayProfile] = {}
        self._primary_fingerprint_fn = primary_fingerprint_fn

    def set_primary_fingerprint_fn(self, fn: Optional[Callable[[], Optional[str]]]) -> None:
        self._primary_fingerprint_fn = fn

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def fingerprints(self) -> Iterator[str]:
        return iter(list(self._profiles))

    def get_if_exists(self, fingerprint: str) -> Optional[DisplayProfile]:
        return self._profiles.get(fingerprint)

    def _primary_profile(self) -> Optional[DisplayProfile]:
        if self._primary_fingerprint_fn is None:
            return None
        primary_fp = self._primary_fingerprint_fn()
        if not primary_fp:
            return None
        return self._profiles.get(primary_fp)

    def get_or_create(self, fingerprint: str) -> DisplayProfile:
        existing = self._profiles.get(fingerprint)
        if existing is not None:
            _LOGGER.debug("Found profile: %s", fingerprint)
            return existing
        primary = self._primary_profile()
        if primary is not None:
            _LOGGER.debug("Inheriting profile for %s from primary display", fingerprint)
            created = replace(primary, extra=copy.deepcopy(primary.extra))
        else:
            _LOGGER.info("New profile created: %s", fingerprint)
            created = replace(DEFAULT_PROFILE, extra={})
        self._profiles[fingerprint] = created
        return created

    # create-on-read alias
    get = get_or_create

    def update(self, fingerprint: str, updates: Mapping[str, Any]) -> DisplayProfile:
        current = self.get_or_create(fingerprint)
        merged = merge_profile(current, updates)
        self._profiles[fingerprint] = merged
        _LOGGER.debug("Updated profile: %s %s", fingerprint, dict(updates))
        return merged

    def has_valid_profile(self, fingerprint: str) -> bool:
        profile = self._profiles.get(fingerprint)
        return profile is not None and profile.has_finite_offsets()

    def load(self, collection: Any) -> None:
        if not isinstance(collection, Mapping):
            if collection is not None:
                _LOGGER.warning("Ignoring display profiles of type %s", type(collection).__name__)
            return
        loaded: Dict[str, DisplayProfile] = {}
        for fingerprint, data in collection.items():
            if not isinstance(data, Mapping):
                _LOGGER.warning("Skipping malformed display profile %s", fingerprint)
                continue
            loaded[str(fingerprint)] = DisplayProfile.from_mapping(data)
        self._profiles = loaded
        _LOGGER.info("Loaded display profiles: %d profiles", len(loaded))

    def export(self) -> Dict[str, Dict[str, Any]]:
        return {fingerprint: profile.to_dict() for fingerprint, profile in self._profiles.items()}
