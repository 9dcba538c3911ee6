"""
Browser session and script execution data models.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class SessionMode(Enum):
    LOCAL = "local"
    CDP = "cdp"


class BrowserSessionStatus(Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    ERROR = "error"


@dataclass
class BrowserSession:
    """A browser handle owned by exactly one request."""
    id: str
    mode: SessionMode
    browser: Any
    endpoint: str = ""
    status: BrowserSessionStatus = BrowserSessionStatus.ACTIVE
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    closed_at: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status == BrowserSessionStatus.ACTIVE


@dataclass
class ExecutionOutcome:
    """Result of running a script: a value on success, a message on failure."""
    ok: bool
    value: Any = None
    error: Optional[str] = None
    duration_ms: float = 0.0

    @classmethod
    def success(cls, value: Any, duration_ms: float = 0.0) -> "ExecutionOutcome":
        return cls(ok=True, value=value, duration_ms=duration_ms)

    @classmethod
    def failure(cls, message: str, duration_ms: float = 0.0) -> "ExecutionOutcome":
        return cls(ok=False, error=message, duration_ms=duration_ms)
