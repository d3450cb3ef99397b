"""
Identity Domain Entities
========================

The signed-in user and the session object that owns it.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

AuthListener = Callable[[Optional["AuthUser"]], None]


@dataclass(frozen=True)
class AuthUser:
    """A user authenticated by the identity provider."""
    uid: str
    email: str
    id_token: str
    display_name: Optional[str] = None
    refresh_token: Optional[str] = None


class AuthSession:
    """
    Holds the current user for one client.

    Listeners are called with the new user (or None after sign-out).
    """

    def __init__(self, user: Optional[AuthUser] = None):
        self._user = user
        self._listeners: List[AuthListener] = []

    def current_user(self) -> Optional[AuthUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """
        Register a listener and call it once with the current state.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)
        listener(self._user)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_user(self, user: AuthUser) -> None:
        self._user = user
        self._notify()

    def clear(self) -> None:
        if self._user is None:
            return
        self._user = None
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)
