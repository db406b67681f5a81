import logging
from typing import Optional

from ..app_settings import app_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for processes hosting the connector."""
    logging.basicConfig(
        level=(level or app_settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
