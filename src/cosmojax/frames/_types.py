"""Frame definitions and resolved body constants.

Numeric fields of a :class:`FrameDefinition` use the sentinel ``-1``
(:data:`cosmojax.constants.UNSET`) for "unset": the value is then taken
from the frame named in ``inherit``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple

from cosmojax.constants import UNSET
from cosmojax.errors import ParseError
from cosmojax.rotation_model import RotationModel

# Constants resolved through ``inherit``
CONSTANT_FIELDS = ("gm", "flattening", "equatorial_radius", "semi_major_radius")

_WHITESPACE_RE = re.compile(r"\s+")

# Alternative names of the bundled inertial frames, keyed by normalized name
FRAME_ALIASES = {
    "earth j2000": "eme2000",
    "moon j2000": "luna",
    "ssb": "ssb j2000",
    "earth moon barycenter": "earth barycenter j2000",
}


def normalize_frame_name(name: str) -> str:
    """Return the lookup key for a frame name.

    Lower-cases, trims, treats underscores as spaces and collapses runs of
    whitespace, so ``"iau_earth"`` and ``" IAU  Earth"`` name the same frame.
    Names listed in :data:`FRAME_ALIASES` map to the key of the frame they
    stand for, so ``"Earth J2000"`` finds ``"EME2000"``.
    """
    key = _WHITESPACE_RE.sub(" ", str(name).replace("_", " ")).strip().lower()
    return FRAME_ALIASES.get(key, key)


def is_unset(value: float) -> bool:
    """Return ``True`` if *value* is the unset sentinel."""
    return value == UNSET


@dataclass(frozen=True)
class FrameDefinition:
    """Immutable description of one reference frame.

    Attributes:
        name: Display name, as registered.
        orientation: Orientation code.
        center: Center (origin body) code.
        parent_orientation: Orientation code of the parent frame; ``-1`` marks a root.
        parent_center: Center code of the parent; ``-1`` means the same center.
        inherit: Name of the frame supplying unset constants, or ``None``.
        gm: Gravitational parameter [m^3/s^2].
        flattening: Flattening of the reference ellipsoid.
        equatorial_radius: Equatorial radius [m].
        semi_major_radius: Semi-major radius [m].
        rotation: Rotation law relative to the parent; ``None`` for a
            frame sharing its parent's orientation.
    """

    name: str
    orientation: int
    center: int
    parent_orientation: int = UNSET
    parent_center: int = UNSET
    inherit: str | None = None
    gm: float = UNSET
    flattening: float = UNSET
    equatorial_radius: float = UNSET
    semi_major_radius: float = UNSET
    rotation: RotationModel | None = None

    @property
    def key(self) -> str:
        """Normalized lookup name."""
        return normalize_frame_name(self.name)

    @property
    def is_root(self) -> bool:
        return self.parent_orientation == UNSET

    @property
    def parent_codes(self) -> tuple[int, int] | None:
        """``(orientation, center)`` of the parent frame, ``None`` for roots."""
        if self.is_root:
            return None
        center = self.center if self.parent_center == UNSET else self.parent_center
        return self.parent_orientation, center

    @classmethod
    def from_record(cls, name: str, record: Mapping[str, Any]) -> FrameDefinition:
        """Build a definition from a raw frame record.

        Rotation formulas are parsed immediately, so malformed formulas
        fail here rather than at first evaluation.

        Args:
            name: Frame name.
            record: Mapping with the frame-record field names. Missing
                numeric fields default to the sentinel and a missing
                ``rotation`` defines a frame with its parent's orientation.

        Raises:
            ParseError: If ``orientation``/``center`` are missing or a
                rotation formula is malformed.
        """
        for key in ("orientation", "center"):
            if key not in record:
                raise ParseError(f"frame '{name}' record is missing '{key}'")

        rotation = record.get("rotation")
        inherit = record.get("inherit") or None
        return cls(
            name=str(name),
            orientation=int(record["orientation"]),
            center=int(record["center"]),
            parent_orientation=int(record.get("parent_orientation", UNSET)),
            parent_center=int(record.get("parent_center", UNSET)),
            inherit=None if inherit is None else str(inherit),
            gm=float(record.get("gm", UNSET)),
            flattening=float(record.get("flattening", UNSET)),
            equatorial_radius=float(record.get("equatorial_radius", UNSET)),
            semi_major_radius=float(record.get("semi_major_radius", UNSET)),
            rotation=None if rotation is None else RotationModel.from_record(rotation),
        )


class BodyConstants(NamedTuple):
    """Physical constants of a frame after inheritance; ``None`` when unset."""

    gm: float | None
    flattening: float | None
    equatorial_radius: float | None
    semi_major_radius: float | None
