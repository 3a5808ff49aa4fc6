"""
Data models shared by the authentication, extraction and persistence layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from dataminer.errors import InvalidGym

# --- Gyms ---

# Gym name -> ActiveSG venue code. Adding a gym only needs a new row here.
GYM_TABLE: dict[str, int] = {
    "AMK_CC": 1016,
    "FERNVALE_SQ": 1048,
    "TOA_PAYOH_CC": 1049,
    "HOKEY_VILLAGE_BOONLAY": 1037,
    "BISHAN": 137,
    "BUKIT_BATOK": 1040,
    "BUKIT_GOMBAK": 145,
    "CHOA_CHU_KANG": 154,
    "CLEMENTI": 160,
    "ENABLING_VILLAGE": 849,
    "HEARTBEAT_BEDOK": 896,
    "HOUGANG": 185,
    "JALAN_BESAR": 967,
    "JURONG_EAST": 196,
    "JURONG_LAKE": 1012,
    "JURONG_WEST": 200,
    "PASIR_RIS": 544,
    "SENGKANG": 239,
    "SENJA_CASHEW": 1089,
    "SILVER_CIRCLE": 886,
    "TAMPINES": 900,
    "TOA_PAYOH": 268,
    "WOODLANDS": 274,
    "YIO_CHU_KANG": 279,
    "YISHUN": 284,
}

Gym = IntEnum("Gym", GYM_TABLE, module=__name__)


def parse_gym(name: str) -> Gym:
    """
    Look up a gym by its name.

    Raises:
        InvalidGym: If the name is not in GYM_TABLE
    """
    try:
        return Gym[name]
    except KeyError:
        raise InvalidGym(name) from None


def all_gyms() -> list[Gym]:
    return list(Gym)


# --- Credentials ---


@dataclass(frozen=True)
class Credentials:
    """User supplied login details. The password never shows up in reprs."""

    email: str
    raw_password: str = field(repr=False)


@dataclass(frozen=True)
class LoginForm:
    """Hidden fields scraped from the login page."""

    csrf_token: str
    rsa_public_key_pem: str = field(repr=False)


@dataclass(frozen=True)
class EncryptedCredentials:
    """Sign-in form body."""

    email: str
    encrypted_password_b64: str = field(repr=False)
    csrf_token: str = field(repr=False)

    def to_form(self) -> dict[str, str]:
        return {
            "email": self.email,
            "ecpassword": self.encrypted_password_b64,
            "_csrf": self.csrf_token,
        }


# --- Snapshots ---


class Timeslot(BaseModel):
    """One bookable hour on a gym page, stored in UTC."""

    model_config = ConfigDict(frozen=True)

    time: datetime
    slots_avail: int = Field(ge=0, le=99)


class _GymSnapshot(BaseModel):
    gym: Gym
    fetched_at: datetime

    @field_validator("gym", mode="before")
    @classmethod
    def gym_from_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_gym(value)
        return value

    @field_serializer("gym")
    def gym_to_name(self, gym: Gym) -> str:
        return gym.name


class GymSlotData(_GymSnapshot):
    """Array-of-structs snapshot: one entry per timeslot."""

    data: list[Timeslot] = []


class GymSlotDataSoA(_GymSnapshot):
    """Struct-of-arrays snapshot: parallel time and slot count lists."""

    time: list[datetime] = []
    slots_avail: list[int] = []

    @classmethod
    def from_slot_data(cls, data: GymSlotData) -> GymSlotDataSoA:
        return cls(
            gym=data.gym,
            fetched_at=data.fetched_at,
            time=[t.time for t in data.data],
            slots_avail=[t.slots_avail for t in data.data],
        )
