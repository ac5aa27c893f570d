from sqlalchemy import Column, DateTime
from datetime import datetime
import pytz


class TimestampMixin:
    """Mixin that provides created/updated timestamps.

    All timestamps are stored timezone-aware in UTC; the dashboard's notion of
    "today" is the UTC calendar date.
    """
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(pytz.utc))
    updated_at = Column(DateTime(timezone=True), onupdate=lambda: datetime.now(pytz.utc))
