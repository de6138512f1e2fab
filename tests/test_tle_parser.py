"""Tests for TLE parsing."""

from datetime import datetime, timezone

import pytest

from orbital_engine.core.tle_parser import (
    TLEChecksumError,
    TLEParseError,
    parse_tle_lines,
    parse_tle_text,
    validate_checksum,
)

ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


class TestParse:
    def test_fields(self):
        tle = parse_tle_lines(ISS_NAME, ISS_LINE1, ISS_LINE2, strict=True)
        assert tle.catalog_number == 25544
        assert tle.international_designator == "98067A"
        assert tle.inclination == pytest.approx(51.6416)
        assert tle.raan == pytest.approx(247.4627)
        assert tle.eccentricity == pytest.approx(0.0006703)
        assert tle.mean_motion == pytest.approx(15.72125391)
        assert tle.bstar == pytest.approx(-1.1606e-5)
        assert tle.revolution_number == 56353

    def test_epoch(self):
        tle = parse_tle_lines(ISS_NAME, ISS_LINE1, ISS_LINE2)
        assert tle.epoch_datetime.date() == datetime(2008, 9, 20).date()
        assert tle.age_days(datetime(2008, 9, 30, 12, 25, 40, tzinfo=timezone.utc)) == pytest.approx(10.0, abs=1e-3)

    def test_period(self):
        tle = parse_tle_lines(ISS_NAME, ISS_LINE1, ISS_LINE2)
        assert tle.orbital_period_seconds / 60.0 == pytest.approx(91.6, abs=0.1)

    def test_name_defaults_to_catalog_number(self):
        assert parse_tle_lines("", ISS_LINE1, ISS_LINE2).name == "SAT-25544"


class TestChecksum:
    def test_valid_lines(self):
        assert validate_checksum(ISS_LINE1)
        assert validate_checksum(ISS_LINE2)

    def test_strict_mode_raises(self):
        bad = ISS_LINE1[:-1] + "0"
        with pytest.raises(TLEChecksumError):
            parse_tle_lines(ISS_NAME, bad, ISS_LINE2, strict=True)

    def test_lenient_mode_warns(self, caplog):
        bad = ISS_LINE1[:-1] + "0"
        tle = parse_tle_lines(ISS_NAME, bad, ISS_LINE2)
        assert tle.catalog_number == 25544
        assert "checksum failed" in caplog.text


class TestMalformed:
    def test_short_line(self):
        with pytest.raises(TLEParseError):
            parse_tle_lines(ISS_NAME, ISS_LINE1[:40], ISS_LINE2)

    def test_swapped_lines(self):
        with pytest.raises(TLEParseError):
            parse_tle_lines(ISS_NAME, ISS_LINE2, ISS_LINE1)

    def test_bulk_text_skips_bad_records(self):
        text = "\n".join([
            ISS_NAME, ISS_LINE1, ISS_LINE2,
            "BROKEN", "1 99999U garbage", "2 99999 garbage",
            ISS_LINE1, ISS_LINE2,
        ])
        tles = parse_tle_text(text)
        assert [t.catalog_number for t in tles] == [25544, 25544]
        assert tles[0].name == ISS_NAME
