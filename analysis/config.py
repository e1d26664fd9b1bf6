"""
analysis/config.py
------------------
Process-wide settings, read once from the environment.

Nothing in the computation modules reads this class directly; the
service layer (analysis/entropy_service.py) resolves defaults from it and
passes plain values down.
"""

import logging
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # JSON reference table: {"genomeLength", "nucSeq", "genes": [...]}
    REFERENCE_DATA_PATH = os.environ.get("ENTROPY_REFERENCE_DATA", os.path.join("data", "refData.json"))

    # Positions below this entropy are hidden from the per-position view
    ENTROPY_DISPLAY_THRESHOLD = float(os.environ.get("ENTROPY_DISPLAY_THRESHOLD", "0.00001"))

    INCLUDE_DELETIONS = _env_flag("ENTROPY_INCLUDE_DELETIONS", False)

    # The last week of a range is usually incomplete
    DROP_LAST_WEEK = _env_flag("ENTROPY_DROP_LAST_WEEK", True)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def configure_logging(level: str = None) -> None:
    """Apply the project's log format. Call once from the entry point."""
    logging.basicConfig(
        level=level or Config.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
