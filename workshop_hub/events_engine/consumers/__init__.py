"""In-process consumers fed by the event dispatcher."""

from .analytics import AnalyticsConsumer  # noqa: F401
from .base import EventConsumer  # noqa: F401
from .notifications import NotificationConsumer  # noqa: F401
