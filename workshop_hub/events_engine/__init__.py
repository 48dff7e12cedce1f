"""Events engine: event log, in-process consumers, and publishers."""

from .dispatcher import EventDispatcher, get_event_dispatcher  # noqa: F401
from .schemas import EventEnvelope, WorkshopEventType  # noqa: F401
