from pathlib import Path

from smartfood.utilities.config import DATA_DIR as _CONFIGURED_DATA_DIR, STORAGE_FILE_NAME

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIGURED_DATA_DIR).resolve()
STORAGE_FILE = DATA_DIR / STORAGE_FILE_NAME
BACKUP_DIR = DATA_DIR / 'backups'

__all__ = ['DATA_DIR', 'STORAGE_FILE', 'BACKUP_DIR']
