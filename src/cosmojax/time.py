"""Calendar, Julian-date and time-system conversions.

Provides the JAX-traceable calendar <-> Julian Date helpers used by
:class:`~cosmojax.epoch.Epoch`, the UTC leap-second table, and the offsets
between the supported time systems (UTC, TAI, TT).  Rotation laws are
expressed in TDB; cosmojax treats TDB as TT, a difference below 2 ms.
"""

from __future__ import annotations

import enum

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from .config import get_dtype
from .constants import JD_MJD_OFFSET, TT_TAI

# Leap second table: (MJD of introduction, TAI-UTC in seconds)
# Source: IERS Bulletin C / USNO leap second table (1972-01-01 through 2017-01-01).
_LEAP_SECOND_TABLE: tuple[tuple[float, float], ...] = (
    (41317.0, 10.0),  # 1972-01-01
    (41499.0, 11.0),  # 1972-07-01
    (41683.0, 12.0),  # 1973-01-01
    (42048.0, 13.0),  # 1974-01-01
    (42413.0, 14.0),  # 1975-01-01
    (42778.0, 15.0),  # 1976-01-01
    (43144.0, 16.0),  # 1977-01-01
    (43509.0, 17.0),  # 1978-01-01
    (43874.0, 18.0),  # 1979-01-01
    (44239.0, 19.0),  # 1980-01-01
    (44786.0, 20.0),  # 1981-07-01
    (45151.0, 21.0),  # 1982-01-01
    (45516.0, 22.0),  # 1983-07-01
    (46247.0, 23.0),  # 1985-07-01
    (47161.0, 24.0),  # 1988-01-01
    (47892.0, 25.0),  # 1990-01-01
    (48257.0, 26.0),  # 1991-01-01
    (48804.0, 27.0),  # 1992-07-01
    (49169.0, 28.0),  # 1993-07-01
    (49534.0, 29.0),  # 1994-07-01
    (50083.0, 30.0),  # 1996-01-01
    (50630.0, 31.0),  # 1997-07-01
    (51179.0, 32.0),  # 1999-01-01
    (53736.0, 33.0),  # 2006-01-01
    (54832.0, 34.0),  # 2009-01-01
    (56109.0, 35.0),  # 2012-07-01
    (57204.0, 36.0),  # 2015-07-01
    (57754.0, 37.0),  # 2017-01-01
)


class TimeSystem(enum.Enum):
    """Time systems accepted when constructing an :class:`~cosmojax.epoch.Epoch`.

    Attributes:
        UTC: Coordinated Universal Time (with leap seconds).
        TAI: International Atomic Time.
        TT: Terrestrial Time, the internal scale of ``Epoch``.
    """

    UTC = "UTC"
    TAI = "TAI"
    TT = "TT"

    @classmethod
    def parse(cls, value: str | TimeSystem) -> TimeSystem:
        """Return the member for *value*, accepting names in any case.

        Raises:
            ValueError: If *value* names no supported time system.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unsupported time system {value!r}. Must be one of: UTC, TAI, TT"
            ) from None


def leap_seconds_tai_utc(mjd: ArrayLike) -> jax.Array:
    """Return TAI-UTC (cumulative leap seconds) for a given MJD.

    For dates before 1972 returns 10.0; after the last entry returns the
    most recent value (37.0).  JIT-compatible via ``jnp.searchsorted``.

    Args:
        mjd: Modified Julian Date (UTC), scalar or array.

    Returns:
        TAI-UTC in seconds.
    """
    mjd = jnp.asarray(mjd, dtype=get_dtype())
    mjd_breaks = jnp.array([m for m, _ in _LEAP_SECOND_TABLE], dtype=get_dtype())
    tai_utc_vals = jnp.array([v for _, v in _LEAP_SECOND_TABLE], dtype=get_dtype())

    # idx-1 is the last entry <= mjd
    idx = jnp.searchsorted(mjd_breaks, mjd, side="right")

    return jnp.where(idx == 0, get_dtype()(10.0), tai_utc_vals[idx - 1])


def offset_to_tt(system: TimeSystem | str, mjd: ArrayLike) -> jax.Array:
    """Return the seconds to add to a time in *system* to obtain TT.

    Args:
        system: Source time system.
        mjd: Modified Julian Date in *system*, used for the leap-second
            lookup when *system* is UTC.

    Returns:
        Offset in seconds (0 for TT, 32.184 for TAI, 32.184 + TAI-UTC for UTC).
    """
    system = TimeSystem.parse(system)
    _float = get_dtype()
    if system is TimeSystem.TT:
        return _float(0.0)
    if system is TimeSystem.TAI:
        return _float(TT_TAI)
    return leap_seconds_tai_utc(mjd) + _float(TT_TAI)


def caldate_to_mjd(
    year: ArrayLike,
    month: ArrayLike,
    day: ArrayLike,
    hour: ArrayLike = 0,
    minute: ArrayLike = 0,
    second: ArrayLike = 0.0,
) -> jax.Array:
    """Return the Modified Julian Date of a Gregorian calendar date and time.

    Traceable and element-wise over array inputs.  Dates before the 1582
    Gregorian reform are not supported.

    References:
        1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
           and Applications*, 2012, Sec. A.1.
    """
    # January and February count as months 13 and 14 of the previous year
    is_jan_or_feb = month <= 2
    year = jnp.where(is_jan_or_feb, year - 1, year)
    month = jnp.where(is_jan_or_feb, month + 12, month)

    B = jnp.floor(year / 400) - jnp.floor(year / 100) + jnp.floor(year / 4)

    mjd = 365 * year - 679004 + B + jnp.floor(30.6001 * (month + 1)) + day

    frac_day = (hour + (minute + second / 60.0) / 60.0) / 24.0

    return get_dtype()(jnp.floor(mjd).astype(jnp.int32)) + frac_day


def caldate_to_jd(
    year: ArrayLike,
    month: ArrayLike,
    day: ArrayLike,
    hour: ArrayLike = 0,
    minute: ArrayLike = 0,
    second: ArrayLike = 0.0,
) -> jax.Array:
    """Julian Date counterpart of :func:`caldate_to_mjd`."""
    return caldate_to_mjd(year, month, day, hour, minute, second) + JD_MJD_OFFSET


def jd_to_caldate(
    jd: ArrayLike,
) -> tuple[jax.Array, jax.Array, jax.Array, jax.Array, jax.Array, jax.Array]:
    """Split a Julian Date into Gregorian calendar components.

    Seconds are rounded to the millisecond.

    Returns:
        tuple: ``(year, month, day, hour, minute, second)``; all int32
        except *second*, which has the configured float dtype.
    """
    jd_shifted = jd + 0.5
    z = jnp.floor(jd_shifted).astype(jnp.int32)
    f = jd_shifted - z

    # Julian/Gregorian switchover at JD 2299161, scaled integer arithmetic
    alpha = (100 * z - 186721625) // 3652425
    a_gregorian = z + 1 + alpha - alpha // 4
    a = jnp.where(z < 2299161, z, a_gregorian)

    b = a + 1524
    c = (100 * b - 12210) // 36525
    d = (36525 * c) // 100
    e = ((b - d) * 10000) // 306001

    day_with_frac = b - d - (306001 * e) // 10000 + f
    day = jnp.floor(day_with_frac).astype(jnp.int32)
    frac_of_day = day_with_frac - day

    month = jnp.where(e < 14, e - 1, e - 13)
    year = jnp.where(month > 2, c - 4716, c - 4715)

    total_ms = jnp.round(frac_of_day * 86400000.0).astype(jnp.int32)
    hour = total_ms // 3600000
    total_ms = total_ms - hour * 3600000
    minute = total_ms // 60000
    total_ms = total_ms - minute * 60000
    second = get_dtype()(total_ms) / 1000.0

    return year, month, day, hour, minute, second
