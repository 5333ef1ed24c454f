from datetime import datetime, timezone


def utcnow():
    """Naive UTC now; the database columns store naive UTC datetimes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
