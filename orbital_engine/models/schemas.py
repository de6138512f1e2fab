"""Pydantic schemas for the frame snapshot handed to a renderer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

Vector3 = tuple[float, float, float]


# --- Bodies ---


class BodyStateSchema(BaseModel):
    body_id: str
    name: str
    body_class: str
    color: str
    position: Vector3
    distance_from_origin: float
    display_radius: float
    is_selected: bool = False
    extrapolated: bool = False
    degraded: bool = False
    tail_direction: Optional[Vector3] = None
    tail_length: Optional[float] = None  # scene units
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude_km: Optional[float] = None
    speed_km_s: Optional[float] = None
    in_shadow: Optional[bool] = None
    region: Optional[str] = None
    distance_label: Optional[str] = None  # probes only
    light_time_label: Optional[str] = None


# --- Paths ---


class PathSchema(BaseModel):
    body_id: str
    kind: str
    closed: bool = False
    points: list[Vector3] = Field(default_factory=list)


# --- Camera ---


class CameraPoseSchema(BaseModel):
    position: Vector3
    target: Vector3


# --- Frame ---


class FrameSnapshot(BaseModel):
    """Everything a renderer needs for one frame."""

    scene: str
    sim_time: datetime
    sim_time_label: str
    rate: float
    rate_label: str
    running: bool
    selected_id: Optional[str] = None
    bodies: dict[str, BodyStateSchema] = Field(default_factory=dict)
    paths: dict[str, PathSchema] = Field(default_factory=dict)
    camera: Optional[CameraPoseSchema] = None  # None while the camera is idle
    show_orbits: bool = True
    show_labels: bool = True
