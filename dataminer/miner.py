"""
Polling loop: every cycle fetches all gyms for a few upcoming days.

Each gym is polled by its own task. Every gym/day fetch uses its own client and
login, so a failure only loses that one snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import httpx

from dataminer.auth import authenticated_session
from dataminer.client import query_timeslots
from dataminer.config import MinerSettings
from dataminer.errors import DataMinerError
from dataminer.models import Credentials, Gym, GymSlotData, GymSlotDataSoA, all_gyms
from dataminer.sink import write_snapshot

logger = logging.getLogger(__name__)


def target_dates(now: datetime, offsets: list[int]) -> list[date]:
    """Days to poll, as offsets from the current UTC date."""
    today = now.astimezone(timezone.utc).date()
    return [today + timedelta(days=offset) for offset in offsets]


async def get_slots(
    credentials: Credentials,
    gym: Gym,
    day: date,
    is_soa: bool = False,
    output_dir: str | Path = "output",
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """
    Log in, fetch one gym/day and write the snapshot.

    Returns:
        Path of the written snapshot

    Raises:
        DataMinerError: If login, the query or the write fails
    """
    async with authenticated_session(credentials, transport) as session:
        timeslots = await query_timeslots(session, gym, day)

    logger.debug(f"{gym.name} {day}: {timeslots}")
    data = GymSlotData(gym=gym, fetched_at=datetime.now(timezone.utc), data=timeslots)
    snapshot = GymSlotDataSoA.from_slot_data(data) if is_soa else data
    return write_snapshot(snapshot, gym, output_dir)


async def _poll_gym(
    credentials: Credentials,
    gym: Gym,
    days: list[date],
    settings: MinerSettings,
    is_soa: bool,
    transport: httpx.AsyncBaseTransport | None,
) -> list[Path]:
    """Fetch a gym's days one after another, pausing after each fetch."""
    written = []
    for day in days:
        try:
            written.append(
                await get_slots(
                    credentials, gym, day, is_soa, settings.output_dir, transport
                )
            )
        except DataMinerError as e:
            logger.error(f"{gym.name} {day}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error for {gym.name} {day}: {e}")
        await asyncio.sleep(settings.pacing_delay_seconds)
    return written


async def run_cycle(
    credentials: Credentials,
    gyms: list[Gym],
    settings: MinerSettings,
    is_soa: bool = False,
    now: datetime | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Path]:
    """
    Run one fetch cycle, with one concurrent task per gym.

    Each gym's days are fetched in turn, every fetch with its own login.

    Returns:
        Paths of the snapshots that were written
    """
    days = target_dates(now or datetime.now(timezone.utc), settings.day_offsets)
    logger.info(f"Starting cycle: {len(gyms)} gyms x {len(days)} days")

    results = await asyncio.gather(
        *(
            _poll_gym(credentials, gym, days, settings, is_soa, transport)
            for gym in gyms
        )
    )

    written = [path for paths in results for path in paths]
    logger.info(
        f"Cycle completed: {len(written)}/{len(gyms) * len(days)} snapshots written"
    )
    return written


async def run_forever(
    credentials: Credentials,
    settings: MinerSettings,
    is_soa: bool = False,
    gyms: list[Gym] | None = None,
) -> None:
    """
    Start a cycle every poll interval, without waiting for the previous one.
    """
    gyms = gyms or all_gyms()
    interval = settings.poll_interval_minutes * 60
    running: set[asyncio.Task] = set()

    while True:
        task = asyncio.create_task(run_cycle(credentials, gyms, settings, is_soa))
        running.add(task)
        task.add_done_callback(running.discard)
        await asyncio.sleep(interval)
