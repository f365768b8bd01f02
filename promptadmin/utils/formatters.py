# promptadmin/utils/formatters.py
from datetime import datetime
import pytz
from ..config import Config

def format_datetime(dt: datetime) -> str:
    """Render a timestamp in the configured timezone"""
    local_tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(local_tz).strftime("%Y-%m-%d %H:%M")

def truncate(text: str, limit: int = 60) -> str:
    """Shorten long text for button labels and list lines"""
    if len(text) <= limit:
        return text
    return text[:limit - 1].rstrip() + "…"
