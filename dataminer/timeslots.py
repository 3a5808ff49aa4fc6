"""
Timeslot extraction from a gym's booking page.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError, compile as compile_selector

from dataminer.errors import CantFindElement, FailedToParseSelector
from dataminer.models import Timeslot
from dataminer.slot_text import parse_slot_count, parse_time

logger = logging.getLogger(__name__)

TIMESLOT_SELECTOR = ".chkbox-grid"
LABEL_SELECTOR = "label"


def compile_fixed_selector(selector: str):
    """Compile one of the module's fixed CSS selectors."""
    try:
        return compile_selector(selector)
    except SelectorSyntaxError as e:
        raise FailedToParseSelector(selector) from e


class TimeslotAccumulator:
    """
    Collects timeslots from the labels of one grid cell.

    A time label sets the pending time. A slot count label sets the pending
    count and commits a timeslot with the current pending time.
    """

    def __init__(self, day: date, now: datetime | None = None) -> None:
        self.day = day
        self.pending_time = now or datetime.now(timezone.utc)
        self.pending_count = 0
        self.committed: list[Timeslot] = []

    def feed(self, text: str) -> Timeslot | None:
        """Consume one label's text, returning the timeslot it committed if any."""
        try:
            self.pending_time = parse_time(text, self.day)
        except CantFindElement:
            pass

        try:
            self.pending_count = parse_slot_count(text)
        except CantFindElement:
            return None

        timeslot = Timeslot(time=self.pending_time, slots_avail=self.pending_count)
        self.committed.append(timeslot)
        return timeslot


def parse_timeslots(
    html: str | BeautifulSoup, day: date, now: datetime | None = None
) -> list[Timeslot]:
    """
    Parse every timeslot on a booking page.

    Never raises for page content: a page without timeslot cells, e.g. one
    served during the nightly maintenance window, gives an empty list.

    Args:
        html: Page body or an already parsed document
        day: Calendar day the page was requested for
        now: Time given to counts that appear before any time label

    Returns:
        Timeslots in document order, one per slot count label
    """
    soup = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, "html.parser")
    timeslot_selector = compile_fixed_selector(TIMESLOT_SELECTOR)
    label_selector = compile_fixed_selector(LABEL_SELECTOR)

    timeslots: list[Timeslot] = []
    for cell in timeslot_selector.select(soup):
        accumulator = TimeslotAccumulator(day, now)
        for label in label_selector.select(cell):
            accumulator.feed(label.get_text())
        timeslots.extend(accumulator.committed)

    logger.debug(f"Parsed {len(timeslots)} timeslots for {day}")
    return timeslots
