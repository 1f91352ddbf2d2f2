"""
Civil-date clock pinned to one timezone.

All "today" and "next midnight" answers are computed in the configured
zone, never in the host machine's local zone.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def resolve_tz(name: str) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Supported forms:
      - "UTC" / "Z" / "GMT"
      - IANA names, e.g. "Asia/Almaty"
      - Fixed offsets: "+05:00", "+0500", "-03:00"

    Raises ValueError for invalid timezone identifiers.
    """
    s = str(name or "").strip()
    if not s:
        raise ValueError("Empty timezone identifier")

    if s.lower() in {"utc", "z", "gmt"}:
        return dt.timezone.utc

    m = _OFFSET_RE.match(s)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {s!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(s)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise ValueError(f"Invalid timezone identifier: {s!r}") from ex


def _utc_now() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc)


class Clock:
    """Calendar adapter for a single fixed civil timezone.

    Args:
        tz_name: Timezone identifier accepted by resolve_tz
        now: Zero-argument callable returning an aware datetime; defaults
             to the system clock. Tests inject a fixed instant here.
    """

    def __init__(self, tz_name: str = "Asia/Almaty", now: Optional[Callable[[], dt.datetime]] = None):
        self.tz_name = tz_name
        self.tz = resolve_tz(tz_name)
        self._now = now or _utc_now

    def now(self) -> dt.datetime:
        """Current instant expressed in the clock's zone."""
        instant = self._now()
        if instant.tzinfo is None:
            raise ValueError("Clock source must return an aware datetime")
        return instant.astimezone(self.tz)

    def today(self) -> dt.date:
        return self.now().date()

    def day_of_year(self) -> int:
        """1-based ordinal day of the current civil date (1 Jan == 1)."""
        return self.today().timetuple().tm_yday

    def ms_until_next_midnight(self) -> int:
        """
        Milliseconds until the next civil-day boundary in the clock's zone.

        The boundary is built from the calendar fields of the local date
        (tomorrow at 00:00 local), so DST shifts in the zone are honoured.
        Never negative: 0 means the boundary has already passed.
        """
        local_now = self.now()
        tomorrow = local_now.date() + dt.timedelta(days=1)
        boundary = dt.datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=self.tz)
        # Re-read the clock: time may have moved while the boundary was built
        remaining = boundary.timestamp() - self._now().timestamp()
        return max(int(remaining * 1000), 0)
