"""Timestamp helpers.

Timestamps are stored and compared in UTC. Some providers hand datetimes back
without tzinfo, so comparisons go through ``as_utc``.
"""

from datetime import UTC, datetime


def as_utc(moment: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime; aware datetimes are converted to UTC."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def resolve_as_of(as_of: datetime | None) -> datetime:
    """The reference instant for time-dependent rules, defaulting to now."""
    return as_utc(as_of) if as_of is not None else datetime.now(UTC)
