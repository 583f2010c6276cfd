import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        fetch_workers: int,
        default_trend_days: int,
        log_level: str,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.fetch_workers = fetch_workers
        self.default_trend_days = default_trend_days
        self.log_level = log_level


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("PNL_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "ledger.db"
    database_url = os.getenv("PNL_DATABASE_URL", f"sqlite:///{default_db}")
    timezone = os.getenv("PNL_TIMEZONE", "Europe/Berlin")
    fetch_workers = max(1, int(os.getenv("PNL_FETCH_WORKERS", "6")))
    default_trend_days = int(os.getenv("PNL_DEFAULT_TREND_DAYS", "30"))
    log_level = os.getenv("PNL_LOG_LEVEL", "INFO").upper()
    return Settings(
        database_url=database_url,
        timezone=timezone,
        fetch_workers=fetch_workers,
        default_trend_days=default_trend_days,
        log_level=log_level,
    )
