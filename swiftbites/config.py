from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SWIFTBITES_")

    db_url: str = "sqlite:///swiftbites.db"
    echo_sql: bool = False
    log_level: str = "INFO"
    seed_file: Path = DATA_DIR / "catalog.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
