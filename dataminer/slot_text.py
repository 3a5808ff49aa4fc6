"""
Parsers for the text of a single timeslot label.

A timeslot cell on the booking page holds labels such as ``07:00 AM`` and
``25 Left``. Each label is tried against both patterns independently.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone

from dataminer.config import DataMinerConstants
from dataminer.errors import CantFindElement

# e.g. "0 Left", "50 Left"
SLOT_RE = re.compile(r"([0-9]+) Left")

# e.g. "07:00 AM", "11:00 PM". Only the first meridiem letter is captured.
TIME_RE = re.compile(r"([0-9]+):[0-9]+ ([AP])")

# Counts (0-99) and hours never have more than two digits on the page
MAX_DIGITS = 2

LOCAL_OFFSET = timedelta(hours=DataMinerConstants.UTC_OFFSET_HOURS)


def parse_slot_count(text: str) -> int:
    """
    Parse the number of free slots from a label.

    Args:
        text: Label text, e.g. "25 Left"

    Returns:
        The slot count

    Raises:
        CantFindElement: If there is no "<n> Left" or n is not in [0, 99]
    """
    match = SLOT_RE.search(text)
    if not match:
        raise CantFindElement("slot count")

    digits = match.group(1)
    if len(digits) > MAX_DIGITS:
        raise CantFindElement("slot count")

    return int(digits)


def parse_hour(text: str) -> int:
    """
    Parse the local hour from a label such as "07:00 PM".

    PM adds 12 to the hour without special casing 12 PM, which yields 24.
    Minutes are ignored.

    Raises:
        CantFindElement: If the label has no time
    """
    match = TIME_RE.search(text)
    if not match:
        raise CantFindElement("timeslot")

    digits = match.group(1)
    if len(digits) > MAX_DIGITS:
        raise CantFindElement("timeslot")

    hour = int(digits)
    if match.group(2) == "P":
        hour += 12
    return hour


def local_hour_to_utc(day: date, hour: int) -> datetime:
    """Anchor a local hour on ``day`` and shift it to UTC."""
    local_midnight = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
    return local_midnight + timedelta(hours=hour) - LOCAL_OFFSET


def parse_time(text: str, day: date) -> datetime:
    """
    Parse a label's time of day on ``day`` into a UTC datetime.

    Raises:
        CantFindElement: If the label has no time
    """
    return local_hour_to_utc(day, parse_hour(text))
