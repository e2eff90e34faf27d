"""Relative timestamps for posts on the wall."""

from datetime import datetime
from typing import Optional, Union

from wall.types import parse_timestamp


def format_absolute(moment: datetime) -> str:
    """en-US style date and time, e.g. "Mar 4, 2025, 09:05 PM"."""
    return f"{moment:%b} {moment.day}, {moment.year}, {moment:%I:%M %p}"


def format_relative(
    created_at: Union[str, datetime],
    now: Optional[datetime] = None,
) -> str:
    """
    Describe how long ago a post was created.

    Elapsed time is floored to whole units:

        under 1 minute (or in the future)   "Just now"
        under 1 hour                        "{n}m ago"
        under 1 day                         "{n}h ago"
        under 7 days                        "{n}d ago"
        otherwise                           absolute date and time

    Naive datetimes are treated as UTC. `now` defaults to the current local
    time; the absolute form is rendered in `now`'s timezone. An unparsable
    timestamp is returned unchanged.
    """
    moment = parse_timestamp(created_at)
    if moment is None:
        return str(created_at)

    reference = parse_timestamp(now) or datetime.now().astimezone()

    minutes = int((reference - moment).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"

    return format_absolute(moment.astimezone(reference.tzinfo))
