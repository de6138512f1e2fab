"""TLE (Two-Line Element) record parsing.

Parses the standard two-line format into a frozen ``TLEData`` record.
A malformed record is a catalog bug, so parsing raises instead of
guessing; a failed checksum is logged and, in strict mode, raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from orbital_engine.utils.constants import SECONDS_PER_DAY
from orbital_engine.utils.time_utils import ensure_utc, tle_epoch_to_datetime

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69

# Fixed columns (0-based, end exclusive)
_CATALOG_NUMBER = slice(2, 7)
_DESIGNATOR = slice(9, 17)
_EPOCH_YEAR = slice(18, 20)
_EPOCH_DAY = slice(20, 32)
_BSTAR = slice(53, 61)
_INCLINATION = slice(8, 16)
_RAAN = slice(17, 25)
_ECCENTRICITY = slice(26, 33)
_ARG_PERIGEE = slice(34, 42)
_MEAN_ANOMALY = slice(43, 51)
_MEAN_MOTION = slice(52, 63)
_REVOLUTION = slice(63, 68)


class TLEParseError(ValueError):
    """Raised when TLE data cannot be parsed."""

    def __init__(self, message: str, line_number: int = 0, raw_line: str = ""):
        self.line_number = line_number
        self.raw_line = raw_line
        super().__init__(message)


class TLEChecksumError(TLEParseError):
    """Raised when a TLE line fails checksum validation in strict mode."""


@dataclass(frozen=True, slots=True)
class TLEData:
    """One element set, angles in degrees and mean motion in rev/day."""

    name: str
    catalog_number: int
    international_designator: str
    epoch_datetime: datetime
    bstar: float
    inclination: float
    raan: float
    eccentricity: float
    arg_perigee: float
    mean_anomaly: float
    mean_motion: float
    revolution_number: int
    line1: str = field(repr=False)
    line2: str = field(repr=False)

    @property
    def orbital_period_seconds(self) -> float:
        return SECONDS_PER_DAY / self.mean_motion

    def age_days(self, at: datetime) -> float:
        """Signed days from the element epoch to ``at``."""
        return (ensure_utc(at) - self.epoch_datetime).total_seconds() / SECONDS_PER_DAY


def validate_checksum(line: str) -> bool:
    """Modulo-10 checksum: digits count their value, minus signs count one."""
    if len(line) < TLE_LINE_LENGTH or not line[68].isdigit():
        return False
    total = sum(int(ch) if ch.isdigit() else 1 for ch in line[:68] if ch.isdigit() or ch == "-")
    return total % 10 == int(line[68])


def _implied_decimal_exponent(raw: str) -> float:
    """Decode the packed ``±NNNNN±E`` form, e.g. '-11606-4' -> -1.1606e-5."""
    text = raw.strip()
    if not text.strip("0+- "):
        return 0.0
    sign = -1.0 if text.startswith("-") else 1.0
    text = text.lstrip("+-")
    split = max(text.rfind("+"), text.rfind("-"))
    if split <= 0:
        return sign * float(f"0.{text}")
    mantissa, exponent = text[:split], int(text[split:])
    return sign * float(f"0.{mantissa}") * 10.0 ** exponent


def _field(line: str, columns: slice, convert: Callable[[str], object], default=None):
    raw = line[columns].strip()
    if not raw and default is not None:
        return default
    return convert(raw)


def parse_tle_lines(
    name: str, line1: str, line2: str, strict: bool = False
) -> TLEData:
    """Parse one element set from its name and two element lines."""
    name, line1, line2 = name.strip(), line1.strip(), line2.strip()

    for number, line in ((1, line1), (2, line2)):
        if len(line) < TLE_LINE_LENGTH or not line.startswith(f"{number} "):
            raise TLEParseError(f"Malformed line {number} for {name!r}", number, line)
        if validate_checksum(line):
            continue
        if strict:
            raise TLEChecksumError(f"Line {number} checksum failed for {name!r}", number, line)
        logger.warning("Line %d checksum failed for %s", number, name)

    try:
        catalog_number = _field(line1, _CATALOG_NUMBER, int)
        epoch = tle_epoch_to_datetime(
            _field(line1, _EPOCH_YEAR, int), _field(line1, _EPOCH_DAY, float)
        )
        mean_motion = _field(line2, _MEAN_MOTION, float)
        record = TLEData(
            name=name or f"SAT-{catalog_number}",
            catalog_number=catalog_number,
            international_designator=line1[_DESIGNATOR].strip(),
            epoch_datetime=epoch,
            bstar=_implied_decimal_exponent(line1[_BSTAR]),
            inclination=_field(line2, _INCLINATION, float),
            raan=_field(line2, _RAAN, float),
            # Leading decimal point is implied
            eccentricity=_field(line2, _ECCENTRICITY, lambda s: float(f"0.{s}")),
            arg_perigee=_field(line2, _ARG_PERIGEE, float),
            mean_anomaly=_field(line2, _MEAN_ANOMALY, float),
            mean_motion=mean_motion,
            revolution_number=_field(line2, _REVOLUTION, int, default=0),
            line1=line1,
            line2=line2,
        )
    except ValueError as e:
        raise TLEParseError(f"Failed to parse TLE for {name!r}: {e}") from e

    if record.mean_motion <= 0:
        raise TLEParseError(f"Non-positive mean motion for {name!r}", 2, line2)
    return record


def parse_tle_text(text: str) -> list[TLEData]:
    """Parse every element set in a catalog feed.

    Accepts both the bare two-line layout and the three-line layout with
    a name line. Bad records are skipped with a warning so one corrupt
    entry does not discard the feed.
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    records: list[TLEData] = []
    index = 0

    while index < len(lines):
        window = lines[index:index + 3]
        if len(window) >= 2 and window[0].startswith("1 ") and window[1].startswith("2 "):
            name, body = "", window[:2]
        elif len(window) == 3 and window[1].startswith("1 ") and window[2].startswith("2 "):
            name, body = window[0], window[1:]
        else:
            index += 1
            continue

        try:
            records.append(parse_tle_lines(name, *body))
        except TLEParseError as e:
            logger.warning("Skipping bad TLE at line %d: %s", index, e)
        index += len(body) + (1 if name else 0)

    return records
