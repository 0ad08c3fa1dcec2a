"""
DateTime Handler module for consistent date and time handling throughout the application.
"""
from datetime import datetime


class DateTimeHandler:
    """
    Centralized source of timestamps written to storage.
    """

    @classmethod
    def get_current_datetime(cls) -> datetime:
        """
        Get the current UTC datetime, truncated to the millisecond precision
        MongoDB stores.

        Returns:
            Current UTC datetime
        """
        now = datetime.utcnow()
        return now.replace(microsecond=(now.microsecond // 1000) * 1000)
