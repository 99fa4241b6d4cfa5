import logging

from correspondence.core.config import settings


def setup_logger() -> logging.Logger:
    """Configure the application logger (console only)."""
    logger = logging.getLogger("correspondence")
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Already configured, don't stack handlers on reload
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(console_handler)

    return logger


logger = setup_logger()
