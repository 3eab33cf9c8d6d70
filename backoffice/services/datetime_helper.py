from datetime import timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from flask import current_app
from flask_login import current_user
import logging

logger = logging.getLogger(__name__)


def get_current_time_zone():
    tz_name = None
    if current_user and getattr(current_user, 'is_authenticated', False):
        tz_name = getattr(current_user, 'time_zone_id', None)
    tz_name = tz_name or current_app.config.get('DISPLAY_TIMEZONE', 'UTC')
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %s, using UTC", tz_name)
        return timezone.utc


def convert_to_user_time(utc_dt, tz=None):
    # Stored timestamps are naive UTC.
    if utc_dt is None:
        return None
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    return utc_dt.astimezone(tz or get_current_time_zone())
