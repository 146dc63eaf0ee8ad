"""Session event publisher for pub/sub notification."""

import logging
import uuid
from typing import Any

from pubsub import pub

from ..models.events import SessionEvent

logger = logging.getLogger(__name__)


class SessionEventPublisher:
    """Publishes session lifecycle events using pubsub.pub."""

    def __init__(self, topic: str = "recording.session"):
        """Initialize session event publisher.

        Args:
            topic: Pub/sub topic name for session events
        """
        self.topic = topic
        logger.info(f"SessionEventPublisher initialized with topic: {topic}")

    def publish(self, session_id: str, event_type: str, **metadata: Any) -> SessionEvent:
        """Publish a session event and return it."""
        event = SessionEvent(
            event_id=uuid.uuid4().hex,
            session_id=session_id,
            event_type=event_type,
            metadata=metadata,
        )
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published {event_type} event for session {session_id}")
        return event
