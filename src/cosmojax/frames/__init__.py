"""Reference frames: catalog, rotation composition and bundled IAU frames.

Provides:

- :class:`FrameCatalog`: validated registry of :class:`FrameDefinition`
  records linked by parent and ``inherit`` references.
- :class:`FrameTransformer`: single-hop and composed rotations, vector
  and state transformations between frames sharing a root.
- :func:`default_catalog`: the IAU body-fixed frames with their J2000
  parents.
"""

from cosmojax.frames._catalog import FrameCatalog
from cosmojax.frames._iau import default_catalog, iau_frame_records
from cosmojax.frames._transform import (
    FrameTransformer,
    model_rotation,
    rotation_from_angles,
)
from cosmojax.frames._types import (
    BodyConstants,
    FRAME_ALIASES,
    FrameDefinition,
    normalize_frame_name,
)

__all__ = [
    "FRAME_ALIASES",
    "BodyConstants",
    "FrameCatalog",
    "FrameDefinition",
    "FrameTransformer",
    "default_catalog",
    "iau_frame_records",
    "model_rotation",
    "normalize_frame_name",
    "rotation_from_angles",
]
