import logging
from typing import Optional

from donation_hub.config import Settings, load_settings
from donation_hub.db.db import Database
from donation_hub.logging_config import setup_logging
from donation_hub.marketplace import Marketplace
from donation_hub.utils.clock import Clock, utcnow


def create_marketplace(settings: Optional[Settings] = None, clock: Clock = utcnow) -> Marketplace:
    settings = settings or load_settings()

    setup_logging(getattr(logging, settings.log_level, logging.INFO))

    database = Database(settings.database_url, echo=settings.sql_echo)
    database.create_db_and_tables()

    marketplace = Marketplace(database, settings, clock)

    if settings.seed_demo_data:
        marketplace.seed_demo_data()

    return marketplace
