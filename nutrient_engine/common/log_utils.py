"""Logging setup and filters.

Log records are enriched with the current calculation id and name so that
the lines of one farm calculation can be grouped.
"""

import json
import logging
import logging.config
from pathlib import Path

from nutrient_engine.common.tracing import ctx_calculation_id, ctx_calculation_name

DEFAULT_LOGGING_CONFIG = Path(__file__).resolve().parents[2] / "logging-dev.json"


class CalculationContextFilter(logging.Filter):
    """Adds ``calculation_id`` and ``calculation`` attributes to log records.

    Both are empty strings outside a calculation, so format strings can
    always reference them.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.calculation_id = ctx_calculation_id.get()
        record.calculation = ctx_calculation_name.get()
        return True


def configure_logging(config_path: Path | str | None = None) -> None:
    """Configure logging from a dictConfig JSON file.

    Falls back to a JSON line format on stderr when the file does not exist.

    Args:
        config_path: dictConfig file (default: logging-dev.json at the project root)
    """
    path = Path(config_path) if config_path else DEFAULT_LOGGING_CONFIG

    if path.exists():
        with open(path) as f:
            logging.config.dictConfig(json.load(f))
        return

    logging.basicConfig(
        level=logging.INFO,
        format=(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "calculation_id": "%(calculation_id)s", '
            '"message": "%(message)s"}'
        ),
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(CalculationContextFilter())
