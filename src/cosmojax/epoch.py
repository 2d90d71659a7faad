"""The epoch module provides the ``Epoch`` class for representing instants in time.

The Epoch class stores an integer Julian Day number, seconds within the
day, and a Kahan summation compensator that keeps repeated additions
(e.g. sweeping a rotation law over many time steps) from accumulating
rounding error.  Instants are held in Terrestrial Time (TT); inputs given
in UTC or TAI are converted on construction.

The Epoch class is registered as a JAX pytree, making it compatible with
``jax.jit``, ``jax.vmap`` and ``jax.lax.scan``.  Seconds use the float
dtype from :func:`cosmojax.config.get_dtype`.
"""

from __future__ import annotations

import math
import re

import jax
import jax.numpy as jnp

from .config import get_dtype, get_epoch_eq_tolerance
from .constants import DAYS_PER_JULIAN_CENTURY, JD_MJD_OFFSET, SECONDS_PER_DAY
from .time import TimeSystem, caldate_to_jd, jd_to_caldate, offset_to_tt

# J2000.0 epoch: JD 2451545.0 (2000-01-01 12:00:00 TT)
_JD_J2000 = 2451545
_SECONDS_J2000 = 0.0

# Valid ISO 8601 epoch string patterns, optionally followed by a time system
_EPOCH_PATTERNS = [
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:\s+(\w+))?$'),
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(?:Z|\s+(\w+))$'),
]


class Epoch:
    """Represents a single instant in time (TT) with compensated arithmetic.

    The internal representation uses three private components:
        ``_jd`` (jnp.int32), ``_seconds`` and ``_kahan_c`` (float dtype).

    Constructors:
        Epoch(2018, 1, 1)
        Epoch(2018, 1, 1, 12, 0, 0.0)
        Epoch(2000, 1, 1, 12, 0, 0.0, time_system="TAI")
        Epoch("2018-01-01T12:00:00Z")        # trailing Z means UTC
        Epoch("2018-01-01T12:00:00 TAI")
        Epoch(other_epoch)

    Date-component constructors default to TT.
    """

    __slots__ = ('_jd', '_seconds', '_kahan_c')

    def __init__(self, *args: int | float | str | Epoch, time_system: str | TimeSystem = TimeSystem.TT) -> None:
        _float = get_dtype()
        self._jd = jnp.int32(0)
        self._seconds = _float(0.0)
        self._kahan_c = _float(0.0)

        if len(args) == 1:
            if isinstance(args[0], str):
                self._init_string(args[0])
            elif isinstance(args[0], Epoch):
                self._init_epoch(args[0])
            else:
                raise ValueError(f"Cannot construct Epoch from {type(args[0])}")
        elif 3 <= len(args) <= 6:
            self._init_date(*args, time_system=time_system)
        else:
            raise ValueError(
                "Epoch requires date components (3-6 args), a string, or an Epoch"
            )

    @classmethod
    def _from_internal(cls, jd, seconds, kahan_c):
        """Create an Epoch from raw JAX arrays without normalization."""
        obj = object.__new__(cls)
        obj._jd = jd
        obj._seconds = seconds
        obj._kahan_c = kahan_c
        return obj

    @classmethod
    def j2000(cls) -> Epoch:
        """Return the J2000.0 reference epoch (2000-01-01 12:00:00 TT)."""
        _float = get_dtype()
        return cls._from_internal(jnp.int32(_JD_J2000), _float(_SECONDS_J2000), _float(0.0))

    def _init_date(self, year, month, day, hour=0, minute=0, second=0.0, time_system=TimeSystem.TT):
        """Initialize from calendar date components given in *time_system*."""
        jd_full = float(caldate_to_jd(year, month, day))

        jd_int = int(math.floor(jd_full))
        frac_day = jd_full - jd_int

        seconds = (frac_day * SECONDS_PER_DAY
                   + hour * 3600.0 + minute * 60.0 + second)

        mjd = jd_int - JD_MJD_OFFSET + seconds / SECONDS_PER_DAY
        seconds += float(offset_to_tt(time_system, mjd))

        _float = get_dtype()
        self._jd = jnp.int32(jd_int)
        self._seconds = _float(seconds)
        self._kahan_c = _float(0.0)

        self._normalize()

    def _init_string(self, string):
        """Initialize from an ISO 8601 string.

        Supported formats:
            - ``YYYY-MM-DD`` (TT) or ``YYYY-MM-DD <system>``
            - ``YYYY-MM-DDTHH:MM:SS[.fff]Z`` (UTC)
            - ``YYYY-MM-DDTHH:MM:SS[.fff] <system>`` with system UTC, TAI or TT
        """
        for pattern in _EPOCH_PATTERNS:
            m = pattern.match(string.strip())
            if not m:
                continue
            groups = m.groups()
            year, month, day = int(groups[0]), int(groups[1]), int(groups[2])

            if len(groups) == 4:
                system = groups[3] or TimeSystem.TT
                self._init_date(year, month, day, time_system=system)
                return

            hour = int(groups[3])
            minute = int(groups[4])
            second = float(groups[5])
            if groups[6]:
                second += float(f"0.{groups[6]}")
            system = groups[7] or TimeSystem.UTC
            self._init_date(year, month, day, hour, minute, second, time_system=system)
            return

        raise ValueError(
            f'Invalid Epoch string: "{string}" is not ISO 8601 compliant'
        )

    def _init_epoch(self, other):
        self._jd = other._jd
        self._seconds = other._seconds
        self._kahan_c = other._kahan_c

    def _normalize(self):
        """Normalize seconds to [0, 86400) by adjusting the Julian day number."""
        _float = get_dtype()
        day_offset = jnp.int32(jnp.floor(self._seconds / SECONDS_PER_DAY))
        self._seconds = self._seconds - _float(day_offset) * _float(SECONDS_PER_DAY)
        self._jd = self._jd + day_offset

    def _compensated_seconds(self):
        return self._seconds - self._kahan_c

    # Arithmetic operators

    def __add__(self, delta: float) -> Epoch:
        """Return a new Epoch advanced by *delta* seconds (Kahan compensated).

        Args:
            delta (float): Seconds to add.

        Returns:
            Epoch: New Epoch with delta seconds added.
        """
        _float = get_dtype()
        delta = _float(delta)
        y = delta - self._kahan_c
        t = self._seconds + y
        new_kahan_c = (t - self._seconds) - y
        new_seconds = t

        day_offset = jnp.int32(jnp.floor(new_seconds / SECONDS_PER_DAY))
        new_seconds = new_seconds - _float(day_offset) * _float(SECONDS_PER_DAY)
        new_jd = self._jd + day_offset

        return Epoch._from_internal(new_jd, new_seconds, new_kahan_c)

    def __sub__(self, other: Epoch | float) -> Epoch | jax.Array:
        """Subtract seconds or compute difference between Epochs.

        Args:
            other: If Epoch, returns the time difference in seconds.
                If numeric, returns a new Epoch with seconds subtracted.

        Returns:
            float or Epoch: Time difference in seconds, or new Epoch.
        """
        if isinstance(other, Epoch):
            _float = get_dtype()
            return (_float(self._jd - other._jd) * _float(SECONDS_PER_DAY)
                    + (self._compensated_seconds()
                       - other._compensated_seconds()))
        return self.__add__(-get_dtype()(other))

    # Comparison operators

    def __eq__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return bool(jnp.abs(self - other) < get_epoch_eq_tolerance())

    def __ne__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return not self.__eq__(other)

    def __lt__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return bool(self - other < -get_epoch_eq_tolerance())

    def __gt__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return bool(self - other > get_epoch_eq_tolerance())

    def __le__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return not self.__gt__(other)

    def __ge__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return not self.__lt__(other)

    # Time properties

    def days_since(self, reference: Epoch) -> jax.Array:
        """Return the elapsed days from *reference* to this epoch.

        Computed from the split representation, so sub-second precision is
        preserved far from the reference.

        Args:
            reference (Epoch): Start of the interval.

        Returns:
            Elapsed days (negative when this epoch precedes *reference*).
        """
        return (self - reference) / get_dtype()(SECONDS_PER_DAY)

    def centuries_since(self, reference: Epoch) -> jax.Array:
        """Return the elapsed Julian centuries from *reference* to this epoch."""
        return self.days_since(reference) / get_dtype()(DAYS_PER_JULIAN_CENTURY)

    def caldate(self) -> tuple[int, int, int, int, int, float]:
        """Return the TT calendar date components.

        Extracts concrete Python values; not traceable under ``jax.jit``.

        Returns:
            tuple: (year, month, day, hour, minute, second).
        """
        comp_seconds = float(self._compensated_seconds())
        jd_full = int(self._jd) + comp_seconds / SECONDS_PER_DAY

        year, month, day, _, _, _ = jd_to_caldate(jd_full)

        # JD day starts at noon
        civil_time = (comp_seconds + 43200.0) % SECONDS_PER_DAY

        hour = int(civil_time // 3600)
        civil_time -= hour * 3600
        minute = int(civil_time // 60)
        second = civil_time - minute * 60

        return int(year), int(month), int(day), hour, minute, second

    def jd(self) -> jax.Array:
        """Return the Julian Date (TT) as a single float."""
        _float = get_dtype()
        return _float(self._jd) + self._compensated_seconds() / _float(SECONDS_PER_DAY)

    def mjd(self) -> jax.Array:
        """Return the Modified Julian Date (TT) as a single float."""
        return self.jd() - get_dtype()(JD_MJD_OFFSET)

    # String representations

    def __str__(self):
        year, month, day, hour, minute, second = self.caldate()
        return (f'{year:04d}-{month:02d}-{day:02d}T'
                f'{hour:02d}:{minute:02d}:{second:06.3f} TT')

    def __repr__(self):
        return (f'Epoch(_jd={int(self._jd)}, _seconds={float(self._seconds)}, '
                f'_kahan_c={float(self._kahan_c)})')

    def __hash__(self):
        return hash((int(self._jd), round(float(self._compensated_seconds()), 6)))


jax.tree_util.register_pytree_node(
    Epoch,
    lambda e: ((e._jd, e._seconds, e._kahan_c), None),
    lambda _, children: Epoch._from_internal(*children),
)
