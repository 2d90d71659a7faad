"""
cosmojax resolves body-fixed rotation laws, frame graphs and eclipse geometry in JAX.
"""

from .constants import (
    DEG2RAD,
    JD_MJD_OFFSET,
    MJD2000,
    JD2000,
    SECONDS_PER_DAY,
    DAYS_PER_JULIAN_CENTURY,
    TT_TAI,
    UNSET,
    GM_SUN,
    R_SUN,
    GM_EARTH,
    R_EARTH,
    WGS84_f,
    GM_MOON,
    R_MOON,
)

from .attitude_representations import (
    Rx,
    Rz,
    RotationMatrix,
)

from .config import (
    set_dtype,
    get_dtype,
    set_max_frame_depth,
    get_max_frame_depth,
)
from .time import TimeSystem
from .epoch import Epoch

from .errors import (
    CosmojaxError,
    ExpressionError,
    ParseError,
    UnknownSymbol,
    EvaluationError,
    FrameGraphError,
    DuplicateFrame,
    FrameNotFound,
    MissingParent,
    CyclicFrameGraph,
    InheritanceChainTooLong,
    IncompatibleFrames,
    OperationCancelled,
)

from .rotation_model import (
    AngleExpression,
    AngleUnit,
    RotationAngles,
    RotationModel,
    parse_expression,
)

from .frames import (
    BodyConstants,
    FrameCatalog,
    FrameDefinition,
    FrameTransformer,
    default_catalog,
    iau_frame_records,
)

from .eclipse import (
    EclipseKind,
    EclipseState,
    eclipse_state,
    illumination,
    lens_area,
)
