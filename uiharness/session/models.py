"""
Data models for browser automation sessions.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..core.config import Config
from ..core.exceptions import UnsupportedBrowserError, SessionStateError


class BrowserKind(Enum):
    """Supported browser engines."""

    CHROME = "chrome"
    FIREFOX = "firefox"
    EDGE = "edge"

    @classmethod
    def parse(cls, name: str) -> "BrowserKind":
        """Resolve a browser name, raising UnsupportedBrowserError if unknown."""
        normalized = (name or "").strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        supported = [kind.value for kind in cls]
        raise UnsupportedBrowserError(
            f"Browser not supported: {name}", browser=name, supported=supported
        )


class Locality(Enum):
    """Where the browser process runs."""

    LOCAL = "local"
    REMOTE = "remote"


class SessionState(Enum):
    """Session lifecycle states."""

    CREATED = "created"
    READY = "ready"
    IN_USE = "in_use"
    CLOSED = "closed"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    SessionState.CREATED: {SessionState.READY, SessionState.FAILED},
    SessionState.READY: {SessionState.IN_USE, SessionState.CLOSED, SessionState.FAILED},
    SessionState.IN_USE: {SessionState.READY, SessionState.CLOSED, SessionState.FAILED},
    SessionState.CLOSED: set(),
    SessionState.FAILED: set(),
}


@dataclass(frozen=True)
class SessionOptions:
    """Options used to open and prepare a session."""

    browser: str = "chrome"
    headless: bool = False
    remote: bool = False
    grid_url: Optional[str] = None
    implicit_wait: int = 10
    page_load_timeout: int = 30

    @classmethod
    def from_config(cls, config: Config) -> "SessionOptions":
        return cls(
            browser=config.browser,
            headless=config.effective_headless,
            remote=config.is_remote,
            grid_url=config.grid_url if config.is_remote else None,
            implicit_wait=config.implicit_wait,
            page_load_timeout=config.page_load_timeout,
        )

    @property
    def locality(self) -> Locality:
        return Locality.REMOTE if self.remote else Locality.LOCAL


@dataclass
class Session:
    """A live automation session owned by exactly one worker."""

    worker_id: str
    browser: BrowserKind
    locality: Locality
    handle: Any = None
    endpoint: Optional[str] = None
    state: SessionState = SessionState.CREATED
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        """Check if the session can still be used."""
        return self.state in (SessionState.READY, SessionState.IN_USE)

    def transition_to(self, target: SessionState) -> None:
        """
        Move the session to a new lifecycle state.

        Raises:
            SessionStateError: If the transition is not allowed
        """
        if target is self.state:
            return
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise SessionStateError(
                f"Cannot move session {self.session_id} from {self.state.value} to {target.value}",
                current_state=self.state.value,
                target_state=target.value,
            )
        self.state = target

    def describe(self) -> dict:
        return {
            "session_id": self.session_id,
            "worker_id": self.worker_id,
            "browser": self.browser.value,
            "locality": self.locality.value,
            "endpoint": self.endpoint,
            "state": self.state.value,
        }
