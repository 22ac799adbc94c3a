"""Logging setup for the invoicer backend."""

import logging
import sys

from backend.invoicer.core.settings import Settings, get_settings

HANDLER_NAME = "invoicer.console"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Attach a stdout handler to the root logger at the configured level."""
    settings = settings or get_settings()
    log_level = getattr(logging, str(settings.log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # create_app may run many times in one process (tests), keep a single handler
    for handler in root_logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            handler.setLevel(log_level)
            return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    console_handler.set_name(HANDLER_NAME)
    root_logger.addHandler(console_handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
