"""
Sync Session and Errors

DESIGN DECISION: Sign-in state lives in an explicit SyncSession object
owned by the controller and handed to the gateway by reference, rather
than in module-level flags. Anything that needs to know whether the
user is signed in asks the session.

Lifecycle:
    UNINITIALIZED --initialize()--> READY --login()--> AUTHENTICATED
    AUTHENTICATED --logout()--> READY
"""

from enum import Enum
from typing import Any, Optional


class SessionState(str, Enum):
    """Where the session is in its lifecycle."""
    UNINITIALIZED = "uninitialized"  # Sync not configured or not set up yet
    READY = "ready"                  # Client configured, nobody signed in
    AUTHENTICATED = "authenticated"  # Holding usable credentials


class SyncSession:
    """Current identity state and the credentials that go with it."""
    
    def __init__(self):
        self._state = SessionState.UNINITIALIZED
        self._credentials: Optional[Any] = None
    
    @property
    def state(self) -> SessionState:
        return self._state
    
    @property
    def credentials(self) -> Optional[Any]:
        return self._credentials
    
    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED
    
    def mark_ready(self) -> None:
        if self._state == SessionState.UNINITIALIZED:
            self._state = SessionState.READY
    
    def authenticate(self, credentials: Any) -> None:
        if self._state == SessionState.UNINITIALIZED:
            raise AuthError("Sync session has not been initialized")
        self._credentials = credentials
        self._state = SessionState.AUTHENTICATED
    
    def clear(self) -> None:
        """Drop credentials. A ready session stays ready."""
        self._credentials = None
        if self._state == SessionState.AUTHENTICATED:
            self._state = SessionState.READY


class SyncGatewayError(Exception):
    """Base exception for remote sync operations."""
    pass


class AuthError(SyncGatewayError):
    """The identity provider could not be reached or denied consent."""
    pass


class SyncError(SyncGatewayError):
    """Transport or provider failure while locating, pushing or pulling."""
    pass
