"""
Time arithmetic shared by the scheduling engine.

All timestamps handed to the engine are normalised into the salon's
timezone before they are compared, so a caller may pass naive local
values or aware values from any zone.
"""

from datetime import datetime, timedelta

import pendulum
from pendulum import DateTime

from .exceptions import ConfigurationError


def localize(moment: datetime, timezone: str) -> DateTime:
    """
    Return ``moment`` as an aware DateTime in ``timezone``.

    Naive values are read as wall-clock time in ``timezone``.
    """
    return pendulum.instance(moment, tz=timezone).in_timezone(timezone)


def compute_end(start: datetime, duration_minutes: int) -> datetime:
    """
    Return the end of a service that starts at ``start``.

    Aware values use absolute time, so crossing midnight or a DST change
    yields the moment ``duration_minutes`` of real time later.
    """
    if duration_minutes <= 0:
        raise ConfigurationError(
            f"duration_minutes must be greater than zero, got {duration_minutes}"
        )

    if start.tzinfo is None:
        return start + timedelta(minutes=duration_minutes)

    return pendulum.instance(start).add(minutes=duration_minutes)
