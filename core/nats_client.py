"""
NATS Client for Python Microservices
Provides event-driven communication between platform services

Wraps the nats-py client. Events are JSON envelopes published on a subject
equal to the event type (e.g. "collaboration.status_changed").
"""

import json
import logging
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import nats
from nats.aio.client import Client as NATSConnection

if TYPE_CHECKING:
    from core.config import InfraConfig


class DecimalEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles Decimal types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            # Money travels as a string to keep exact precision
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Platform event types"""

    # Collaboration Events
    COLLABORATION_CREATED = "collaboration.created"
    COLLABORATION_STATUS_CHANGED = "collaboration.status_changed"
    COLLABORATION_COMPLETED = "collaboration.completed"
    COLLABORATION_CANCELLED = "collaboration.cancelled"


class ServiceSource(Enum):
    """Event producing services"""

    COLLABORATION_SERVICE = "collaboration_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.utcnow().isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), cls=DecimalEncoder).encode()


class NATSEventBus:
    """
    NATS event bus using the native nats-py client.
    """

    def __init__(
        self,
        service_name: str,
        config: Optional["InfraConfig"] = None,
        servers: Optional[str] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (used as connection name)
            config: Optional InfraConfig, defaults to environment
            servers: Explicit server URL, overrides config
        """
        from core.config import InfraConfig

        self.service_name = service_name
        config = config or InfraConfig.from_env()
        self.servers = servers or config.nats_servers

        self._nc: Optional[NATSConnection] = None
        self._is_connected = False

        logger.info(f"NATS EventBus initialized: {self.servers}")

    @property
    def is_connected(self) -> bool:
        return self._is_connected and self._nc is not None and self._nc.is_connected

    async def connect(self):
        """Connect to NATS"""
        try:
            self._nc = await nats.connect(
                servers=self.servers,
                name=self.service_name,
            )
            self._is_connected = True
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS at {self.servers}: {e}")
            raise

    async def publish_event(self, event: Event) -> bool:
        """
        Publish an event using the event type as subject.

        Returns:
            True when the message was handed to NATS
        """
        if not self.is_connected:
            logger.error("Not connected to NATS")
            return False

        try:
            await self._nc.publish(event.type, event.to_bytes())
            logger.info(f"Published event {event.type} [{event.id}]")
            return True
        except Exception as e:
            logger.error(f"Error publishing event {event.id}: {e}")
            return False

    async def close(self):
        """Drain and close the connection"""
        if self._nc is not None and self._is_connected:
            try:
                await self._nc.drain()
            except Exception as e:
                logger.warning(f"Error draining NATS connection: {e}")
            finally:
                self._is_connected = False
                self._nc = None
        logger.info(f"NATS EventBus closed for {self.service_name}")


__all__: List[str] = [
    "DecimalEncoder",
    "EventType",
    "ServiceSource",
    "Event",
    "NATSEventBus",
]
