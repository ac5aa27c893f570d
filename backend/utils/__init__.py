from datetime import datetime
import uuid

import pytz


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string; all stored timestamps use this form."""
    return utc_now().isoformat()


__all__ = ['generate_id', 'utc_now', 'utc_now_iso']
