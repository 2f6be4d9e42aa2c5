# backend/scheduler/services/clock.py

from datetime import datetime

import pendulum


class BusinessClock:
    """Wall-clock time in the business timezone, as a naive datetime.

    Slots are expressed in local business time, so "now" is compared against
    them without tz arithmetic.
    """

    def __init__(self, timezone: str = "UTC"):
        self.timezone = pendulum.timezone(timezone)

    def now(self) -> datetime:
        local = pendulum.now(self.timezone)
        return datetime(
            local.year, local.month, local.day,
            local.hour, local.minute, local.second,
        )
