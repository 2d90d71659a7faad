"""
The `constants` module defines the mathematical, time and body constants used by cosmojax.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Modified Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
MJD2000 = 51544.5

"""
Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
JD2000 = 2451545.0

"""
Seconds in one day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

"""
Days in one Julian century. Units: *days*
"""
DAYS_PER_JULIAN_CENTURY = 36525.0

"""
Offset TT - TAI, constant by definition. Units: *s*
"""
TT_TAI = 32.184

# Frame records

"""
Sentinel marking an unset numeric field in a frame record. A frame constant
equal to this value is taken from the frame named in ``inherit``; a parent
code equal to this value means "none" (orientation) or "same as own"
(center).
"""
UNSET = -1

# Body Constants
"""
Gravitational constant of the Sun. [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_SUN = 132712440041.939400 * 1e9

"""
Solar radius. [m]

References:

1. M. Emilio et al., *Measuring the Solar Radius from Space during the 2003
and 2006 Mercury Transits*, ApJ 750:135, 2012.
"""
R_SUN = 696342.0 * 1e3

"""
Earth's Gravitational constant [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_EARTH = 3.986004415e14

"""
Earth's semi-major axis as defined by the WGS84 geodetic system. [m]

References:

1. NIMA Technical Report TR8350.2
"""
R_EARTH = 6378137.0

"""
Earth's ellipsoidal flattening.  WGS84 Value.

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_f = 1.0 / 298.257223563

"""
Gravitational constant of the Moon. [m^3/s^2]

References:

1. JPL DE430 Ephemerides.
"""
GM_MOON = 4902.800066 * 1e9

"""
Mean radius of the Moon. [m]

References:

1. B. Archinal et al., *Report of the IAU Working Group on Cartographic
Coordinates and Rotational Elements: 2015*, 2018.
"""
R_MOON = 1737.4 * 1e3
