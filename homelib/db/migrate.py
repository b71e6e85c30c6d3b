"""Apply Alembic migrations programmatically.

The API runs this on startup so a fresh SQLite file is brought up to the
latest schema without a separate ``alembic upgrade head`` step.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[2]
_SCRIPT_LOCATION = _REPO_ROOT / "alembic"


def build_alembic_config(database_url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(_SCRIPT_LOCATION))
    # configparser interpolation treats "%" as special.
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def run_migrations(engine: Engine, revision: str = "head") -> None:
    """Upgrade the database bound to ``engine`` to ``revision``."""
    config = build_alembic_config(engine.url.render_as_string(hide_password=False))
    logger.info("Applying database migrations up to %s", revision)
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, revision)
