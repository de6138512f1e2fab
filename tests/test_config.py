"""Tests for configuration and the headless entry point."""

import json
from pathlib import Path

import pytest

from orbital_engine.config import EngineConfig
from orbital_engine.main import main
from orbital_engine.utils.constants import DEFAULT_SAMPLE_COUNT, TLE_REFRESH_SECONDS


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig.from_env({})
        assert config.sample_count == DEFAULT_SAMPLE_COUNT
        assert config.tle_refresh_seconds == TLE_REFRESH_SECONDS

    def test_overrides(self):
        config = EngineConfig.from_env({
            "ORBITAL_ENGINE_TLE_REFRESH_SECONDS": "600",
            "ORBITAL_ENGINE_SAMPLE_COUNT": "65",
            "ORBITAL_ENGINE_DATA_DIR": "/tmp/orbits",
            "ORBITAL_ENGINE_LOG_LEVEL": "debug",
        })
        assert config.tle_refresh_seconds == 600.0
        assert config.sample_count == 65
        assert config.data_dir == Path("/tmp/orbits")
        assert config.log_level == "DEBUG"

    def test_unparseable_value(self):
        with pytest.raises(ValueError, match="ORBITAL_ENGINE_REQUEST_TIMEOUT"):
            EngineConfig.from_env({"ORBITAL_ENGINE_REQUEST_TIMEOUT": "soon"})

    def test_out_of_range_value(self):
        with pytest.raises(ValueError):
            EngineConfig.from_env({"ORBITAL_ENGINE_SAMPLE_COUNT": "2"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("ORBITAL_ENGINE_CAMERA_TRANSITION_MS", "250")
        assert EngineConfig.from_env().camera_transition_ms == 250.0


class TestMain:
    def test_dumps_snapshot(self, capsys, monkeypatch):
        monkeypatch.delenv("ORBITAL_ENGINE_LOG_LEVEL", raising=False)
        assert main(["--scene", "comets", "--time", "1986-02-09T00:00:00", "--focus", "halley"]) == 0
        snapshot = json.loads(capsys.readouterr().out)
        assert snapshot["scene"] == "comets"
        assert snapshot["selected_id"] == "halley"
        assert snapshot["bodies"]["halley"]["tail_length"] > 0.0
        assert snapshot["sim_time"].startswith("1986-02-09")
