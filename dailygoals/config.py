from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Directory holding goals.json, completed_goals.json and settings.json
    data_dir: str = "~/.dailygoals"
    default_tz: str = "UTC"  # Calendar days for streaks and stats are counted here
    goals_api_key: SecretStr | None = None

    # Streak: a gap of more than this many days restarts (on completion) or expires (on startup)
    streak_grace_days: int = 3

    # Timer tick period in seconds. Ticks only touch memory, never disk.
    tick_interval_seconds: float = 1.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="DAILYGOALS_", env_file=".env", extra="ignore")

    @field_validator("default_tz")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value!r}") from None
        return value


settings = Settings()
