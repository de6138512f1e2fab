"""HTTP fetcher for CelesTrak element sets.

Responses are written atomically into ``<data_dir>/tle_cache`` so the
last good copy survives a failed or partial refresh. Failures are
reported through ``DownloadResult`` rather than raised; callers decide
whether stale data is acceptable.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional

import requests

from orbital_engine.utils.constants import CELESTRAK_BASE_URL, CELESTRAK_GROUPS

logger = logging.getLogger(__name__)


class DownloadStatus(Enum):
    COMPLETE = auto()
    FAILED = auto()


@dataclass
class DownloadResult:
    """Result of a fetch."""
    status: DownloadStatus
    path: Optional[Path] = None
    error: Optional[str] = None
    bytes_downloaded: int = 0

    @property
    def ok(self) -> bool:
        return self.status is DownloadStatus.COMPLETE

    def read_text(self) -> str:
        if self.path is None:
            return ""
        return self.path.read_text(encoding="utf-8")


class Downloader:
    """Element-set downloader sharing one HTTP session."""

    def __init__(self, data_dir: Path, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self._data_dir = Path(data_dir)
        self._timeout = timeout
        self._lock = threading.Lock()
        self._session = session

    @property
    def cache_dir(self) -> Path:
        return self._data_dir / "tle_cache"

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": "OrbitalEngine/1.0"})
        return self._session

    def group_cache_path(self, group_key: str) -> Path:
        celestrak_key = CELESTRAK_GROUPS.get(group_key, group_key)
        return self.cache_dir / f"{celestrak_key}.tle"

    def download_tle_group(self, group_key: str) -> DownloadResult:
        """Fetch a CelesTrak group (display name or group key)."""
        celestrak_key = CELESTRAK_GROUPS.get(group_key, group_key)
        url = f"{CELESTRAK_BASE_URL}?GROUP={celestrak_key}&FORMAT=tle"
        return self._download_file(url, self.group_cache_path(group_key))

    def download_tle_by_norad_id(self, norad_id: int) -> DownloadResult:
        url = f"{CELESTRAK_BASE_URL}?CATNR={norad_id}&FORMAT=tle"
        return self._download_file(url, self.cache_dir / f"norad_{norad_id}.tle")

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def _download_file(self, url: str, dest: Path) -> DownloadResult:
        logger.info("Downloading %s -> %s", url, dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            response = self._get_session().get(url, timeout=self._timeout)
            response.raise_for_status()

            # CelesTrak answers "no results" with an HTML page or a bare message
            text = response.text.strip()
            if not text or "<html" in text.lower() or not text.splitlines()[-1].startswith("2 "):
                return DownloadResult(status=DownloadStatus.FAILED, error=f"No TLE data in response from {url}")

            payload = (text + "\n").encode("utf-8")
            fd, tmp_path = tempfile.mkstemp(dir=str(dest.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                with self._lock:
                    os.replace(tmp_path, dest)
            except OSError:
                Path(tmp_path).unlink(missing_ok=True)
                raise

            logger.info("Download complete: %s (%d bytes)", dest, len(payload))
            return DownloadResult(status=DownloadStatus.COMPLETE, path=dest, bytes_downloaded=len(payload))

        except requests.exceptions.Timeout:
            msg = f"Download timed out after {self._timeout}s: {url}"
            logger.warning(msg)
            return DownloadResult(status=DownloadStatus.FAILED, error=msg)

        except requests.exceptions.ConnectionError as e:
            msg = f"Connection error downloading {url}: {e}"
            logger.warning(msg)
            return DownloadResult(status=DownloadStatus.FAILED, error=msg)

        except requests.exceptions.HTTPError as e:
            msg = f"HTTP error downloading {url}: {e}"
            logger.warning(msg)
            return DownloadResult(status=DownloadStatus.FAILED, error=msg)

        except requests.exceptions.RequestException as e:
            msg = f"Request failed for {url}: {e}"
            logger.warning(msg)
            return DownloadResult(status=DownloadStatus.FAILED, error=msg)

        except OSError as e:
            msg = f"Could not write {dest}: {e}"
            logger.error(msg)
            return DownloadResult(status=DownloadStatus.FAILED, error=msg)
