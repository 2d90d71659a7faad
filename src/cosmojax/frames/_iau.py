"""Bundled IAU body-fixed frames and their J2000 inertial parents.

Rotation laws follow Archinal et al. (2015).  The Moon uses the mean
Earth / rotation axis convention.  Each body-fixed frame inherits its
physical constants from the J2000 frame centred on the same body (or
barycenter).

All J2000 frames share the orientation code ``0`` and hang off the
``SSB J2000`` root, so any two bundled frames can be related.

References:
    1. B. A. Archinal et al., "Report of the IAU Working Group on
       Cartographic Coordinates and Rotational Elements: 2015",
       *Celestial Mechanics and Dynamical Astronomy*, 130:22, 2018.
    2. R. S. Park et al., "The JPL Planetary and Lunar Ephemerides
       DE440 and DE441", *The Astronomical Journal*, 161:105, 2021.
"""

from __future__ import annotations

from typing import Any

from cosmojax.constants import (
    GM_EARTH,
    GM_MOON,
    GM_SUN,
    R_EARTH,
    R_MOON,
    R_SUN,
    UNSET,
    WGS84_f,
)
from cosmojax.frames._catalog import FrameCatalog

# name: (center, gm [m^3/s^2], flattening, equatorial radius [m]); UNSET where
# the frame has no body shape
_J2000_FRAMES = {
    "Sun J2000": (10, GM_SUN, 0.0, R_SUN),
    "Venus barycenter J2000": (2, 324858.592000 * 1e9, 0.0, 6051.8e3),
    "EME2000": (399, GM_EARTH, WGS84_f, R_EARTH),
    "Earth Barycenter J2000": (3, GM_EARTH + GM_MOON, UNSET, UNSET),
    "Luna": (301, GM_MOON, 0.0012, R_MOON),
    "Mars barycenter J2000": (4, 42828.375214 * 1e9, 0.005886, 3396.19e3),
    "Jupiter barycenter J2000": (5, 126712764.800000 * 1e9, 0.064874, 71492.0e3),
    "Saturn barycenter J2000": (6, 37940585.200000 * 1e9, 0.097962, 60268.0e3),
    "Uranus barycenter J2000": (7, 5794548.600000 * 1e9, 0.022927, 25559.0e3),
    "Neptune barycenter J2000": (8, 6836527.100580 * 1e9, 0.017081, 24764.0e3),
}

# name: (orientation, center, inherit, right_asc, declin, w, context)
_IAU_FRAMES = {
    "iau_sun": (
        10, 10, "Sun J2000",
        "289.13",
        "63.87",
        "84.176 + 14.18440000*d",
        None,
    ),
    "iau_venus": (
        200, 2, "Venus barycenter J2000",
        "272.76",
        "61.16",
        "160.20 - 1.4813688*d",
        None,
    ),
    "iau_earth": (
        300, 399, "EME2000",
        "-0.641*T",
        "90.0 - 0.557*T",
        "190.147 + 360.9856235*d",
        None,
    ),
    "iau_mars": (
        400, 4, "Mars barycenter J2000",
        "317.269202 - 0.10927547*T"
        " + 0.000068*sin(198.991226 + 19139.4819985*T)"
        " + 0.000238*sin(226.292679 + 38280.8511281*T)"
        " + 0.000052*sin(249.663391 + 57420.7251593*T)"
        " + 0.000009*sin(266.183510 + 76560.6367950*T)"
        " + 0.419057*sin(79.398797 + 0.5042615*T)",
        "54.432516 - 0.05827105*T"
        " + 0.000051*cos(122.433576 + 19139.9407476*T)"
        " + 0.000141*cos(43.058401 + 38280.8753272*T)"
        " + 0.000031*cos(57.663379 + 57420.7517205*T)"
        " + 0.000005*cos(79.476401 + 76560.6495004*T)"
        " + 1.591274*cos(166.325722 + 0.5042615*T)",
        "176.049863 + 350.891982443297*d"
        " + 0.000145*sin(129.071773 + 19140.0328244*T)"
        " + 0.000157*sin(36.352167 + 38281.0473591*T)"
        " + 0.000040*sin(56.668646 + 57420.9295360*T)"
        " + 0.000001*sin(67.364003 + 76560.2552215*T)"
        " + 0.000001*sin(104.792680 + 95700.4387578*T)"
        " + 0.584542*sin(95.391654 + 0.5042615*T)",
        None,
    ),
    "iau_jupiter": (
        500, 5, "Jupiter barycenter J2000",
        "268.056595 - 0.006499*T + 0.000117*sin(Ja) + 0.000938*sin(Jb)"
        " + 0.001432*sin(Jc) + 0.000030*sin(Jd) + 0.002150*sin(Je)",
        "64.495303 + 0.002413*T + 0.000050*cos(Ja) + 0.000404*cos(Jb)"
        " + 0.000617*cos(Jc) - 0.000013*cos(Jd) + 0.000926*cos(Je)",
        "284.95 + 870.536*d",
        {
            "Ja": "99.360714 + 4850.4046*T",
            "Jb": "175.895369 + 1191.9605*T",
            "Jc": "300.323162 + 262.5475*T",
            "Jd": "114.012305 + 6070.2476*T",
            "Je": "49.511251 + 64.3000*T",
        },
    ),
    "iau_saturn": (
        600, 6, "Saturn barycenter J2000",
        "40.589 - 0.036*T",
        "83.537 - 0.004*T",
        "38.90 + 810.7939024*d",
        None,
    ),
    "iau_uranus": (
        700, 7, "Uranus barycenter J2000",
        "257.311",
        "-15.175",
        "203.81 - 501.1600928*d",
        None,
    ),
    "iau_neptune": (
        800, 8, "Neptune barycenter J2000",
        "299.36 + 0.70*sin(N)",
        "43.46 - 0.51*cos(N)",
        "249.978 + 541.1397757*d - 0.48*sin(N)",
        {"N": "357.85 + 52.316*T"},
    ),
    "iau_moon": (
        301, 301, "Luna",
        "269.9949 + 0.0031*T - 3.8787*sin(E1) - 0.1204*sin(E2) + 0.0700*sin(E3)"
        " - 0.0172*sin(E4) + 0.0072*sin(E6) - 0.0052*sin(E10) + 0.0043*sin(E13)",
        "66.5392 + 0.0130*T + 1.5419*cos(E1) + 0.0239*cos(E2) - 0.0278*cos(E3)"
        " + 0.0068*cos(E4) - 0.0029*cos(E6) + 0.0009*cos(E7) + 0.0008*cos(E10)"
        " - 0.0009*cos(E13)",
        "WP + 3.5610*sin(E1) + 0.1208*sin(E2) - 0.0642*sin(E3) + 0.0158*sin(E4)"
        " + 0.0252*sin(E5) - 0.0066*sin(E6) - 0.0047*sin(E7) - 0.0046*sin(E8)"
        " + 0.0028*sin(E9) + 0.0052*sin(E10) + 0.0040*sin(E11) + 0.0019*sin(E12)"
        " - 0.0044*sin(E13)",
        {
            "WP": "38.3213 + 13.17635815*d - 1.4e-12*d*d",
            "E1": "125.045 - 0.0529921*d",
            "E2": "250.089 - 0.1059842*d",
            "E3": "260.008 + 13.0120009*d",
            "E4": "176.625 + 13.3407154*d",
            "E5": "357.529 + 0.9856003*d",
            "E6": "311.589 + 26.4057084*d",
            "E7": "134.963 + 13.0649930*d",
            "E8": "276.617 + 0.3287146*d",
            "E9": "34.226 + 1.7484877*d",
            "E10": "15.134 - 0.1589763*d",
            "E11": "119.743 + 0.0036096*d",
            "E12": "239.961 + 0.1643573*d",
            "E13": "25.053 + 12.9590088*d",
        },
    ),
}


def iau_frame_records() -> dict[str, dict[str, Any]]:
    """Return raw records for the bundled frames.

    The result is a fresh mapping on every call, in the same shape an
    external configuration loader produces, so callers may add or alter
    records before building a catalog from it.

    Returns:
        dict: Frame name to raw frame record.
    """
    records: dict[str, dict[str, Any]] = {
        "SSB J2000": {
            "orientation": 0,
            "center": 0,
            "parent_orientation": UNSET,
            "parent_center": UNSET,
        },
    }
    for name, (center, gm, flattening, radius) in _J2000_FRAMES.items():
        records[name] = {
            "orientation": 0,
            "center": center,
            "parent_orientation": 0,
            "parent_center": 0,
            "gm": gm,
            "flattening": flattening,
            "equatorial_radius": radius,
            "semi_major_radius": radius,
        }
    for name, (orientation, center, inherit, ra, dec, w, context) in _IAU_FRAMES.items():
        rotation = {"right_asc": ra, "declin": dec, "w": w, "angle_unit": "degrees"}
        if context is not None:
            rotation["context"] = dict(context)
        records[name] = {
            "orientation": orientation,
            "center": center,
            "inherit": inherit,
            "gm": UNSET,
            "parent_orientation": 0,
            "parent_center": UNSET,
            "flattening": UNSET,
            "equatorial_radius": UNSET,
            "semi_major_radius": UNSET,
            "rotation": rotation,
        }
    return records


def default_catalog(max_depth: int | None = None) -> FrameCatalog:
    """Return a validated catalog of the bundled frames.

    Args:
        max_depth: Maximum frame-graph depth; see :class:`FrameCatalog`.

    Returns:
        FrameCatalog: ``SSB J2000``, the J2000 body frames and the IAU
        body-fixed frames.
    """
    return FrameCatalog.from_records(iau_frame_records(), max_depth=max_depth)
