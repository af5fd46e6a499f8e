import logging
from typing import Optional

from core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the API process and scripts"""
    logging.basicConfig(
        level=(level or settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
