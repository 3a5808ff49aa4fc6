"""
Fetching a gym's booking page for one day.

Example query:
    https://members.myactivesg.com/facilities/view/activity/1031/venue/154?time_from=1616256000
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone

import httpx

from dataminer.auth import Session, site_details
from dataminer.config import DataMinerConstants, SiteDetails
from dataminer.errors import FailedToParseUrl, NetworkError
from dataminer.models import Gym, Timeslot
from dataminer.timeslots import parse_timeslots

logger = logging.getLogger(__name__)


def utc_midnight_timestamp(day: date) -> int:
    return int(datetime.combine(day, time(0, 0), tzinfo=timezone.utc).timestamp())


def build_timeslot_url(
    gym: Gym, day: date, site: SiteDetails = site_details
) -> httpx.URL:
    """
    Build the booking page URL for a gym and day.

    Raises:
        FailedToParseUrl: If the configured template gives an invalid URL
    """
    url = site.timeslot_url_template.format(
        facility_type=DataMinerConstants.FACILITY_TYPE,
        venue=int(gym),
        time_from=utc_midnight_timestamp(day),
    )
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise FailedToParseUrl(url) from e

    if not parsed.scheme or not parsed.host:
        raise FailedToParseUrl(url)
    return parsed


async def fetch_timeslot_page(
    session: Session, gym: Gym, day: date, site: SiteDetails = site_details
) -> str:
    """
    GET the booking page with the session's referer.

    The site is unreliable between 06:00 and 08:00 local time. Whatever comes
    back is returned as-is and simply parses to no timeslots.

    Raises:
        NetworkError: If the request fails
    """
    url = build_timeslot_url(gym, day, site)
    logger.info(f"Fetching timeslots for {gym.name} on {day}")

    try:
        response = await session.client.get(
            url, headers={"Referer": session.referer_url}
        )
    except httpx.HTTPError as e:
        raise NetworkError(f"Timeslot request for {gym.name} failed: {e}") from e

    if response.status_code != httpx.codes.OK:
        logger.warning(
            f"Timeslot page for {gym.name} returned status {response.status_code}"
        )
    return response.text


async def query_timeslots(
    session: Session, gym: Gym, day: date, site: SiteDetails = site_details
) -> list[Timeslot]:
    """
    Fetch and parse the timeslots of a gym for one day.

    Args:
        session: Authenticated session
        gym: Gym to query
        day: Calendar day

    Returns:
        Parsed timeslots, possibly empty
    """
    body = await fetch_timeslot_page(session, gym, day, site)
    return parse_timeslots(body, day)
