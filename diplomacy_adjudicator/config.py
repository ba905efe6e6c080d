"""
Configuration for the Diplomacy adjudicator.
Values come from the environment, optionally loaded from a .env file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from diplomacy_adjudicator.core.map import STANDARD_MAP_PATH

# Load environment variables
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_map_path() -> Path:
    """Map file to adjudicate on; DIPLOMACY_MAP_FILE overrides the bundled standard map."""
    path = os.getenv('DIPLOMACY_MAP_FILE')
    return Path(path) if path else STANDARD_MAP_PATH


def get_log_level() -> str:
    return os.getenv('DIPLOMACY_LOG_LEVEL', 'INFO').upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for command-line use."""
    level_name = (level or get_log_level()).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT
    )
