"""Physical, scale and presentation constants for the orbital engine.

All physical values use km, seconds and degrees unless noted. Scene-space
values are derived from ``SCALE_KM`` and ``AU_KM`` only, so every scene
shares one conversion anchor.
"""

import math

# --- Scene Scale ---
SCALE_KM: float = 1000.0  # km per scene unit
AU_KM: float = 149597870.7  # km -- 1 Astronomical Unit
AU: float = AU_KM / SCALE_KM  # scene units per AU

# --- Gravitational Parameters ---
MU_EARTH: float = 398600.4418  # km^3/s^2
GAUSSIAN_GRAVITATIONAL_CONSTANT: float = 0.01720209895  # AU^1.5 / day
GM_SUN_AU3_DAY2: float = GAUSSIAN_GRAVITATIONAL_CONSTANT ** 2
MU_MOON: float = 4902.800066  # km^3/s^2
# Earth-Moon two-body parameter for geocentric lunar orbits
GM_EARTH_MOON_AU3_DAY2: float = (MU_EARTH + MU_MOON) * 86400.0 ** 2 / AU_KM ** 3

# --- Body Radii (km) ---
R_SUN: float = 695700.0
R_EARTH: float = 6371.0  # mean radius
R_EARTH_EQUATORIAL: float = 6378.137  # WGS84 semi-major axis
R_MOON: float = 1737.4
FLATTENING: float = 1.0 / 298.257223563
ECCENTRICITY_SQ: float = FLATTENING * (2.0 - FLATTENING)

PHYSICAL_RADII_KM: dict[str, float] = {
    "sun": R_SUN,
    "mercury": 2439.7,
    "venus": 6051.8,
    "earth": R_EARTH,
    "moon": R_MOON,
    "mars": 3389.5,
    "jupiter": 69911.0,
    "saturn": 58232.0,
    "uranus": 25362.0,
    "neptune": 24622.0,
}

# --- Time ---
SECONDS_PER_DAY: float = 86400.0
DAYS_PER_JULIAN_CENTURY: float = 36525.0
J2000_JD: float = 2451545.0
UNIX_EPOCH_JD: float = 2440587.5
SIDEREAL_DAY_SECONDS: float = 86164.0905

# --- Frames ---
OBLIQUITY_J2000_DEG: float = 84381.406 / 3600.0

# --- Light ---
SPEED_OF_LIGHT: float = 299792.458  # km/s

# --- Derived Math Constants ---
TWO_PI: float = 2.0 * math.pi
DEG_TO_RAD: float = math.pi / 180.0
RAD_TO_DEG: float = 180.0 / math.pi

# --- Kepler Solver ---
KEPLER_MAX_ITERATIONS: int = 50
KEPLER_TOLERANCE: float = 1e-6  # radians

# --- Satellite Propagation ---
TLE_STALE_DAYS: float = 14.0
GROUND_TRACK_HALF_WINDOW_MINUTES: int = 45
GROUND_TRACK_STEP_SECONDS: float = 60.0
GROUND_TRACK_LIFT: float = 1.002  # globe radius multiplier above the mesh
GLOBE_RADIUS: float = R_EARTH / SCALE_KM  # tracker globe, scene units

# --- Comet Tails ---
TAIL_VISIBLE_AU: float = 5.0
MIN_TAIL_LENGTH_AU: float = 0.5
MAX_TAIL_LENGTH_AU: float = 10.0

# --- Path Sampling ---
DEFAULT_SAMPLE_COUNT: int = 129
COMET_SAMPLE_COUNT: int = 513
MIN_SAMPLE_COUNT: int = 3
ORBIT_CACHE_BUCKET_SECONDS: float = 3600.0  # simulated seconds
TRACK_CACHE_BUCKET_SECONDS: float = 1.0  # wall-clock seconds
SATELLITE_ORBIT_SAMPLE_COUNT: int = 181

# --- Display Scales ---
# Physical radii are sub-pixel at solar-system scale; these multipliers
# are applied to the scaled radius and floored at MIN_DISPLAY_RADIUS.
MIN_DISPLAY_RADIUS: float = 0.5
DISPLAY_MULTIPLIERS: dict[str, float] = {
    "planet": 500.0,
    "moon": 500.0,
    "probe": 1.0,
    "comet": 1.0,
    "satellite": 50.0,
}
DISPLAY_RADIUS_OVERRIDES: dict[str, float] = {
    "sun": 20000.0,
    "jupiter": 12000.0,
    "saturn": 10000.0,
    "uranus": 6000.0,
    "neptune": 6000.0,
}

# --- Camera ---
CAMERA_TRANSITION_MS: float = 1000.0
OVERVIEW_FOCUS_DISTANCE: float = 5.0 * AU
FOCUS_DISTANCES: dict[str, float] = {
    "planet": 0.15 * AU,
    "moon": 0.02 * AU,
    "comet": 0.5 * AU,
    "probe": 2.0 * AU,
    "satellite": 3.0 * R_EARTH / SCALE_KM,
}
FOCUS_OFFSET_DIRECTION: tuple[float, float, float] = (1.0, 0.5, 1.0)

# --- Time Speeds (simulated seconds per wall second) ---
TIME_SPEEDS: list[tuple[str, float]] = [
    ("1x", 1.0),
    ("10x", 10.0),
    ("100x", 100.0),
    ("1000x", 1000.0),
    ("1 day/s", 86400.0),
    ("1 week/s", 604800.0),
    ("1 month/s", 2592000.0),
]

# --- Celestrak API ---
CELESTRAK_BASE_URL: str = "https://celestrak.org/NORAD/elements/gp.php"
TLE_REFRESH_SECONDS: float = 3600.0

CELESTRAK_GROUPS: dict[str, str] = {
    "Space Stations": "stations",
    "GPS Constellation": "gps-ops",
    "Starlink": "starlink",
    "Weather Satellites": "weather",
    "Science": "science",
    "Active": "active",
}

# --- Body Colors ---
BODY_COLORS: dict[str, str] = {
    "sun": "#FFFF00",
    "mercury": "#B5B5B5",
    "venus": "#E8CDA2",
    "earth": "#4A90D9",
    "moon": "#888888",
    "mars": "#C1440E",
    "jupiter": "#D8CA9D",
    "saturn": "#F4D59E",
    "uranus": "#D1E7E7",
    "neptune": "#5B5DDF",
    "orbit": "#444444",
}

CONSTELLATION_COLORS: dict[str, str] = {
    "stations": "#FF6B6B",
    "gps": "#4ECDC4",
    "weather": "#45B7D1",
    "science": "#F7DC6F",
    "starlink": "#95A5A6",
    "active": "#9B59B6",
}
