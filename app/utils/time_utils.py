from datetime import datetime
import pytz

IST = pytz.timezone('Asia/Kolkata')

def get_ist_time():
    """Get current time in IST"""
    return datetime.now(IST)

def parse_timestamp(value: str):
    """Parse an ISO timestamp from Supabase into IST"""
    dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if dt.tzinfo is None:
        return IST.localize(dt)
    return dt.astimezone(IST)

def format_date_for_display(value: str):
    """Format a stored timestamp as a date"""
    return parse_timestamp(value).strftime("%Y-%m-%d")
