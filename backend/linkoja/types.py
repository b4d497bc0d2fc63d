from datetime import datetime, timezone

from sqlalchemy.types import TypeDecorator, DateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.
    PostgreSQL keeps the offset; SQLite hands back naive values, which are stored as UTC
    and re-tagged on load so comparisons against utcnow() never mix naive and aware values.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
