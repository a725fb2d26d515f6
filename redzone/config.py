"""Application configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "RedZone Tracker"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Local state lives under ~/.redzone (cache entries + league store)
    data_dir: Path = Path("~/.redzone").expanduser()

    # Cache settings
    cache_ttl_minutes: float = 30
    week_cache_ttl_minutes: float = 10
    write_debounce_ms: int = 500
    storage_quota_bytes: int = 4 * 1024 * 1024

    # Kickoff of the last game of the previous week + 3.5h duration + 6h grace
    week_transition_offset_hours: float = 9.5

    # Upstream APIs
    http_timeout_seconds: float = 20.0
    sleeper_base_url: str = "https://api.sleeper.app/v1"
    espn_scoreboard_url: str = (
        "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
    )

    # IANA zone used to classify kickoff windows; empty means system local time
    local_timezone: str = ""

    @field_validator("data_dir")
    @classmethod
    def _expand_data_dir(cls, value: Path) -> Path:
        return Path(value).expanduser()

    class Config:
        env_file = ".env"
        env_prefix = "REDZONE_"
        case_sensitive = False

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "cache"

    @property
    def leagues_file(self) -> Path:
        return self.data_dir / "leagues.json"


settings = Settings()
