"""
Backup utility for smartfood storage files.
Keeps timestamped copies of a data file before it is overwritten.
"""
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from smartfood.utilities.config import BACKUP_KEEP

logger = logging.getLogger(__name__)


class BackupManager:
    """Manages timestamped backups of data files."""

    def __init__(self, backup_dir: Path, keep: int = BACKUP_KEEP):
        self.backup_dir = Path(backup_dir)
        self.keep = keep

    def create_backup(self, source: Path) -> Optional[Path]:
        """Copy source into the backup directory; returns the backup path, or None if source is missing."""
        source = Path(source)
        if not source.exists():
            logger.debug(f"Nothing to back up, file not found: {source}")
            return None

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        destination = self.backup_dir / f"{source.stem}_{timestamp}{source.suffix}"
        shutil.copy2(source, destination)
        logger.info(f"Backup created: {destination.name}")

        self._cleanup_old_backups(source)
        return destination

    def list_backups(self, source: Path) -> List[Path]:
        """Backups of source, oldest first."""
        source = Path(source)
        pattern = f"{source.stem}_*{source.suffix}"
        return sorted(self.backup_dir.glob(pattern), key=lambda p: p.name)

    def _cleanup_old_backups(self, source: Path):
        """Remove old backups, keeping only the most recent ones."""
        backups = self.list_backups(source)
        for backup in backups[:-self.keep] if self.keep > 0 else backups:
            backup.unlink()
            logger.info(f"Removed old backup: {backup.name}")

    def restore_backup(self, backup: Path, destination: Path):
        """Restore a backup over destination, backing up the current destination first."""
        backup = Path(backup)
        if not backup.exists():
            raise FileNotFoundError(f"Backup not found: {backup}")
        content = backup.read_bytes()
        destination = Path(destination)
        if destination.exists():
            # may rotate `backup` itself out of the directory
            self.create_backup(destination)
        destination.write_bytes(content)
        logger.info(f"Restored backup: {backup.name} -> {destination.name}")
