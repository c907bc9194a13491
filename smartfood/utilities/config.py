"""Configuration management for the smartfood core."""
import logging
import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

from smartfood.utilities import constants

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('SMARTFOOD_DATA_DIR', str(BASE_DIR / 'data')))
STORAGE_FILE_NAME: Final[str] = os.getenv('SMARTFOOD_STORAGE_FILE', 'storage.json')

# Pantry Alerts Configuration
DAYS_BEFORE_EXPIRY: Final[int] = int(os.getenv('DAYS_BEFORE_EXPIRY', str(constants.DAYS_BEFORE_EXPIRY)))
LOW_STOCK_THRESHOLD: Final[dict[str, float]] = {
    unit: float(os.getenv(f'LOW_STOCK_THRESHOLD_{unit.upper()}', str(default)))
    for unit, default in constants.LOW_STOCK_THRESHOLD.items()
}

# Backups
BACKUP_KEEP: Final[int] = int(os.getenv('BACKUP_KEEP', '10'))

# Logging
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = LOG_LEVEL):
    """Configure root logging once for the process (composition root only)."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
