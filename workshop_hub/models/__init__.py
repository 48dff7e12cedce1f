"""SQLAlchemy ORM models for the workshop service."""

from workshop_hub.models.base import Base  # noqa: F401
from workshop_hub.models.notification import Notification  # noqa: F401
from workshop_hub.models.platform_event import PlatformEvent  # noqa: F401
from workshop_hub.models.registration import Registration  # noqa: F401
from workshop_hub.models.review import Review  # noqa: F401
from workshop_hub.models.workshop import Workshop  # noqa: F401
