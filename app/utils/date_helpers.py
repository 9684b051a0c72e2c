from datetime import datetime, timedelta, timezone


class DateHelpers:
    @staticmethod
    def utc_now() -> datetime:
        """Naive UTC timestamp, matching how DateTime columns are stored"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def days_from_now(days: int) -> datetime:
        return DateHelpers.utc_now() + timedelta(days=days)

    @staticmethod
    def to_naive_utc(value: datetime) -> datetime:
        """Convert an aware datetime to naive UTC; naive values pass through"""
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def is_expired(expires_at: datetime) -> bool:
        if expires_at is None:
            return False
        return DateHelpers.to_naive_utc(expires_at) < DateHelpers.utc_now()
