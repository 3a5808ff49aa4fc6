"""
Writes gym snapshots as JSON files under ``<output_dir>/<date>/``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import BaseModel

from dataminer.config import DataMinerConstants
from dataminer.errors import IoError
from dataminer.models import Gym

logger = logging.getLogger(__name__)

LOCAL_TZ = timezone(timedelta(hours=DataMinerConstants.UTC_OFFSET_HOURS))


def snapshot_path(gym: Gym, output_dir: str | Path, now: datetime) -> Path:
    """Path of a snapshot file, named by the local (UTC+8) date and time."""
    local_now = now.astimezone(LOCAL_TZ)
    day_dir = Path(output_dir) / local_now.strftime("%Y-%m-%d")
    return day_dir / f"{gym.name}-{local_now.strftime('%Y-%m-%d %H-%M-%S')}.json"


def _write_new_file(path: Path, text: str) -> Path:
    """Write ``text`` to ``path``, adding a counter suffix if the name is taken."""
    candidate = path
    counter = 1
    while True:
        try:
            with candidate.open("x", encoding="utf-8") as f:
                f.write(text)
            return candidate
        except FileExistsError:
            candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
            counter += 1


def write_snapshot(
    snapshot: BaseModel,
    gym: Gym,
    output_dir: str | Path = "output",
    now: datetime | None = None,
) -> Path:
    """
    Serialize a snapshot to its dated directory.

    Existing snapshots are never overwritten: a second write for the same gym
    within one second gets a ``-1``, ``-2``, ... suffix.

    Args:
        snapshot: GymSlotData or GymSlotDataSoA
        gym: Gym the snapshot belongs to
        output_dir: Root output directory
        now: Write time, defaults to the current time

    Returns:
        Path of the written file

    Raises:
        IoError: If the directory or file cannot be written
    """
    if now is None:
        now = datetime.now(timezone.utc)

    path = snapshot_path(gym, output_dir, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path = _write_new_file(path, snapshot.model_dump_json(indent=2))
    except OSError as e:
        raise IoError(f"Failed to write {path}: {e}") from e

    logger.info(f"{path}, write successful")
    return path
