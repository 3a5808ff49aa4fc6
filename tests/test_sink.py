"""Tests for writing snapshots to disk."""

import json
from datetime import datetime, timezone

import pytest

from dataminer.errors import IoError
from dataminer.models import Gym, GymSlotData, GymSlotDataSoA, Timeslot
from dataminer.sink import snapshot_path, write_snapshot

NOW = datetime(2024, 1, 9, 17, 30, 5, tzinfo=timezone.utc)


def test_snapshot_path_uses_local_time(tmp_path):
    path = snapshot_path(Gym.HOUGANG, tmp_path, NOW)
    assert path == tmp_path / "2024-01-10" / "HOUGANG-2024-01-10 01-30-05.json"


def test_write_snapshot(tmp_path):
    data = GymSlotData(
        gym=Gym.HOUGANG,
        fetched_at=NOW,
        data=[Timeslot(time=NOW, slots_avail=4)],
    )
    path = write_snapshot(data, Gym.HOUGANG, tmp_path, now=NOW)

    assert path.exists()
    payload = json.loads(path.read_text())
    assert payload["gym"] == "HOUGANG"
    assert payload["data"] == [{"time": "2024-01-09T17:30:05Z", "slots_avail": 4}]


def test_existing_directory_is_fine(tmp_path):
    data = GymSlotDataSoA(gym=Gym.HOUGANG, fetched_at=NOW)
    (tmp_path / "2024-01-10").mkdir()

    first = write_snapshot(data, Gym.HOUGANG, tmp_path, now=NOW)
    second = write_snapshot(data, Gym.WOODLANDS, tmp_path, now=NOW)

    assert first.parent == second.parent
    assert sorted(p.name for p in first.parent.iterdir()) == [
        "HOUGANG-2024-01-10 01-30-05.json",
        "WOODLANDS-2024-01-10 01-30-05.json",
    ]


def test_unwritable_output(tmp_path):
    blocker = tmp_path / "output"
    blocker.write_text("not a directory")
    data = GymSlotData(gym=Gym.HOUGANG, fetched_at=NOW)

    with pytest.raises(IoError):
        write_snapshot(data, Gym.HOUGANG, blocker, now=NOW)


def test_same_second_write_keeps_both(tmp_path):
    first_data = GymSlotData(gym=Gym.HOUGANG, fetched_at=NOW)
    second_data = GymSlotData(
        gym=Gym.HOUGANG, fetched_at=NOW, data=[Timeslot(time=NOW, slots_avail=9)]
    )

    first = write_snapshot(first_data, Gym.HOUGANG, tmp_path, now=NOW)
    second = write_snapshot(second_data, Gym.HOUGANG, tmp_path, now=NOW)
    third = write_snapshot(first_data, Gym.HOUGANG, tmp_path, now=NOW)

    assert [first.name, second.name, third.name] == [
        "HOUGANG-2024-01-10 01-30-05.json",
        "HOUGANG-2024-01-10 01-30-05-1.json",
        "HOUGANG-2024-01-10 01-30-05-2.json",
    ]
    assert json.loads(first.read_text())["data"] == []
    assert json.loads(second.read_text())["data"][0]["slots_avail"] == 9
