"""Process-wide logging setup shared by the API and the CLI scripts."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storeauth.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


def configure_logging(settings: "Settings") -> None:
    """Configure the root logger once; later calls are no-ops (basicConfig semantics)."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    # SQL echo is controlled by DEBUG on the engine; keep the logger quiet otherwise.
    if not settings.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
