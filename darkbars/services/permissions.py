# darkbars/services/permissions.py
import logging
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class PermissionState(str, Enum):
    GRANTED = "granted"
    PROMPT = "prompt"
    DENIED = "denied"


PermissionCallback = Callable[[PermissionState], None]


class PermissionMonitor:
    """
    Mirror of the platform's geolocation permission.

    Holds a single current value and notifies subscribers when it changes.
    The monitor does not gate acquisition itself; callers consult
    ``trigger_enabled`` before starting a run.
    """

    def __init__(self, initial: PermissionState = PermissionState.PROMPT):
        self._state = initial
        self._subscribers: List[PermissionCallback] = []

    @property
    def state(self) -> PermissionState:
        return self._state

    def update(self, new_state: PermissionState) -> bool:
        """Set the mirrored state. Returns True if it changed."""
        new_state = PermissionState(new_state)
        if new_state == self._state:
            return False
        logger.info("Geolocation permission changed: %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        for callback in list(self._subscribers):
            callback(new_state)
        return True

    def subscribe(self, callback: PermissionCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


def trigger_enabled(state: Optional[PermissionState], busy: bool = False) -> bool:
    """Whether the search trigger may be used. ``None`` means no pre-check is available."""
    if busy:
        return False
    return state != PermissionState.DENIED
