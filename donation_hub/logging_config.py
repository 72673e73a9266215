import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def setup_logging(level=logging.INFO) -> logging.Logger:
    """Attach a stdout handler to the package logger once per process."""
    logger = logging.getLogger("donation_hub")
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)

    # SQL statements are logged only when SQL_ECHO is set
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return logger
