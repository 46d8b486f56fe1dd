from datetime import datetime, timezone


def utcnow() -> datetime:
    """Horodatage UTC naïf, comparable aux colonnes DateTime sans fuseau (PostgreSQL et SQLite)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
