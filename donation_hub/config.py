import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///donation_hub.db"
    jwt_secret: str = "dev-only-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 24 * 60  # 1 day
    activity_feed_limit: int = 15
    log_level: str = "INFO"
    seed_demo_data: bool = False
    sql_echo: bool = False


def load_settings() -> Settings:
    load_dotenv()

    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url).strip() or defaults.database_url,
        jwt_secret=os.getenv("JWT_SECRET", "").strip() or defaults.jwt_secret,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
        access_token_expire_minutes=int(
            os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
        ),
        activity_feed_limit=int(os.getenv("ACTIVITY_FEED_LIMIT", defaults.activity_feed_limit)),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        seed_demo_data=_env_flag("SEED_DEMO_DATA"),
        sql_echo=_env_flag("SQL_ECHO"),
    )
