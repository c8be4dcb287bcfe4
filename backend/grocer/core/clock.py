"""
Time source for the application

app.state.clock defaults to utc_now; tests swap in a fixed clock.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
