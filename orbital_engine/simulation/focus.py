"""Selected-body state shared by the panels, the labels and the camera."""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FocusListener = Callable[[Optional[str], Optional[str]], None]  # (previous, current)


class FocusSelection:
    """The currently focused body id, or ``None`` for the overview."""

    def __init__(self, current: Optional[str] = None):
        self._current = current
        self._previous: Optional[str] = None
        self._listeners: list[FocusListener] = []

    @property
    def current(self) -> Optional[str]:
        return self._current

    @property
    def previous(self) -> Optional[str]:
        return self._previous

    def add_listener(self, listener: FocusListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FocusListener) -> None:
        self._listeners.remove(listener)

    def select(self, body_id: Optional[str]) -> bool:
        """Focus ``body_id``; returns True when this was a transition.

        Re-selecting the current focus is a no-op and notifies nobody.
        """
        if body_id == self._current:
            return False
        self._previous, self._current = self._current, body_id
        logger.debug("Focus %s -> %s", self._previous, self._current)
        for listener in list(self._listeners):
            listener(self._previous, self._current)
        return True

    def clear(self) -> bool:
        return self.select(None)
