# app/utils/logging.py
import logging
import sys
from typing import Optional

from app.config import Settings, settings as default_settings


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure root logging from settings and return the application logger."""
    settings = settings or default_settings

    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
        handlers=handlers,
        force=True
    )

    # msal and urllib3 are chatty at INFO
    logging.getLogger("msal").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("app")
