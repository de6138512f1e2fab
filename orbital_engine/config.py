"""Engine configuration with environment overrides.

Every field defaults to the value in ``utils.constants``; set
``ORBITAL_ENGINE_<FIELD>`` (upper case) to override, e.g.
``ORBITAL_ENGINE_TLE_REFRESH_SECONDS=600``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

from orbital_engine.utils.constants import (
    CAMERA_TRANSITION_MS,
    COMET_SAMPLE_COUNT,
    DEFAULT_SAMPLE_COUNT,
    MIN_SAMPLE_COUNT,
    TLE_REFRESH_SECONDS,
    TLE_STALE_DAYS,
)

ENV_PREFIX = "ORBITAL_ENGINE_"


@dataclass(frozen=True)
class EngineConfig:
    data_dir: Path = Path.home() / ".orbital_engine"
    tle_refresh_seconds: float = TLE_REFRESH_SECONDS
    request_timeout: float = 30.0
    sample_count: int = DEFAULT_SAMPLE_COUNT
    comet_sample_count: int = COMET_SAMPLE_COUNT
    camera_transition_ms: float = CAMERA_TRANSITION_MS
    tle_stale_days: float = TLE_STALE_DAYS
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.sample_count < MIN_SAMPLE_COUNT or self.comet_sample_count < MIN_SAMPLE_COUNT:
            raise ValueError(f"Sample counts must be at least {MIN_SAMPLE_COUNT}")
        if self.tle_refresh_seconds <= 0 or self.request_timeout <= 0:
            raise ValueError("Refresh interval and request timeout must be positive")
        if self.camera_transition_ms < 0:
            raise ValueError("Camera transition duration cannot be negative")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        """Build a config from ``ORBITAL_ENGINE_*`` variables."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[f.name] = _coerce(f.name, raw)
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}{f.name.upper()}={raw!r}: {e}") from e
        return cls(**overrides)


_INT_FIELDS = {"sample_count", "comet_sample_count"}
_FLOAT_FIELDS = {"tle_refresh_seconds", "request_timeout", "camera_transition_ms", "tle_stale_days"}


def _coerce(name: str, raw: str):
    if name == "data_dir":
        return Path(raw).expanduser()
    if name in _INT_FIELDS:
        return int(raw)
    if name in _FLOAT_FIELDS:
        return float(raw)
    return raw.upper() if name == "log_level" else raw
