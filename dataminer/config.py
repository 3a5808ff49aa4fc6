from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

env_path = Path(__file__).parent / ".env"


class LoginDetails(BaseSettings):
    """Credentials used by the cassette recorder and the live tests."""

    model_config = SettingsConfigDict(env_file=env_path, extra="ignore")

    username: str = Field(default="", alias="DATAMINER_USERNAME")
    password: str = Field(default="", alias="DATAMINER_PASSWORD")


class MinerSettings(BaseSettings):
    """Run settings for the polling loop, overridable via DATAMINER_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="DATAMINER_", env_file=env_path, extra="ignore"
    )

    poll_interval_minutes: int = 20
    day_offsets: list[int] = [0, 2, 3]
    pacing_delay_seconds: float = 1.0
    output_dir: str = "output"
    log_level: str = "INFO"

    # Empty means every known gym
    gyms: list[str] = []


class DataMinerConstants:
    """Centralized constants for the ActiveSG site."""

    DEFAULT_TIMEOUT = 15

    # The booking pages render in Singapore time
    UTC_OFFSET_HOURS = 8

    # Gym facility type
    FACILITY_TYPE = 1031

    # HTTP Headers
    USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:95.0) Gecko/20100101 Firefox/95.0"
    ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"


class SiteDetails(BaseModel):
    base_url: str = "https://members.myactivesg.com/"
    login_page_url: str = base_url + "auth"
    sign_in_url: str = base_url + "auth/signin"
    profile_url: str = base_url + "profile"
    timeslot_url_template: str = (
        base_url
        + "facilities/view/activity/{facility_type}/venue/{venue}?time_from={time_from}"
    )
