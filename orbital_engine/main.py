"""Orbital Engine: headless entry point.

Mounts one scene, runs a few frames and prints the last frame snapshot
as JSON. Useful for checking a scene without a renderer attached.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Optional, Sequence

from orbital_engine.config import EngineConfig
from orbital_engine.core.catalog import station_bodies
from orbital_engine.log import setup_logging
from orbital_engine.services.element_store import ElementSetStore
from orbital_engine.simulation.scene import SceneContext, SceneKind
from orbital_engine.utils.downloader import Downloader
from orbital_engine.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an orbital scene headless and dump a frame.")
    parser.add_argument("--scene", choices=[k.value for k in SceneKind], default=SceneKind.ORRERY.value)
    parser.add_argument("--time", type=datetime.fromisoformat, default=None,
                        help="Simulation start (ISO 8601, UTC if no offset)")
    parser.add_argument("--rate", type=float, default=1.0, help="Simulated seconds per wall second")
    parser.add_argument("--frames", type=int, default=1)
    parser.add_argument("--focus", default=None, help="Body id to focus")
    parser.add_argument("--no-orbits", action="store_true")
    parser.add_argument("--fetch-tles", action="store_true", help="Refresh element sets from CelesTrak")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    config = EngineConfig.from_env()
    setup_logging(config.log_level)
    logger.info("Starting Orbital Engine (%s scene)", args.scene)

    store = None
    downloader = None
    if args.fetch_tles:
        downloader = Downloader(config.data_dir, timeout=config.request_timeout)
        store = ElementSetStore(
            downloader,
            refresh_seconds=config.tle_refresh_seconds,
            seed=[body.tle for body in station_bodies()],
        )
        store.load_cached_group("stations")

    start = ensure_utc(args.time) if args.time is not None else None
    with SceneContext(SceneKind(args.scene), config=config, start_time=start, element_store=store) as scene:
        scene.clock.set_rate(args.rate)
        scene.show_orbits = not args.no_orbits
        if store is not None:
            scene.refresh_elements(fetch=True)
        if args.focus:
            scene.select(args.focus)

        snapshot = scene.frame()
        for _ in range(args.frames - 1):
            time.sleep(1 / 60)
            snapshot = scene.frame()

    if downloader is not None:
        downloader.close()

    sys.stdout.write(snapshot.model_dump_json(indent=2))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
