"""
Persistence layer.

``base`` declares the repository and unit‑of‑work interfaces the
services depend on; ``sqlite`` implements them on top of
``app.core.db``.
"""

from .base import (  # noqa: F401
    MediaRepository,
    MeetupFilter,
    MeetupRepository,
    NotificationQueue,
    SubscriptionFilter,
    SubscriptionRepository,
    UnitOfWork,
    UserRepository,
)
from .sqlite import SQLiteUnitOfWork  # noqa: F401
