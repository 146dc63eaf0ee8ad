"""Event models published over pub/sub during a recording session."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    event_id: str
    session_id: str
    event_type: str  # "started", "stopped", "saved", "failed"
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)
