import logging

from smartfood.events.Event_Bus import PANTRY_LOW_STOCK, PANTRY_NEAR_EXPIRY, EventBus
from smartfood.infra.paths import BACKUP_DIR, STORAGE_FILE
from smartfood.infra.Repository import Repository
from smartfood.infra.Repository_File import load_repository, save_repository
from smartfood.utilities.backup import BackupManager
from smartfood.utilities.config import setup_logging

logger = logging.getLogger("smartfood")


def log_alert(event_name, payload):
    logger.warning(f"{event_name}: {payload['ingredient']}")


def build_repository() -> Repository:
    """Composition root: one Repository per process, handed to whoever needs it."""
    bus = EventBus()
    bus.subscribe(PANTRY_LOW_STOCK, log_alert)
    bus.subscribe(PANTRY_NEAR_EXPIRY, log_alert)
    return Repository(event_bus=bus)


def main():
    setup_logging()
    repository = build_repository()
    load_repository(repository, STORAGE_FILE)

    for key, value in repository.inventory_statistics().items():
        logger.info(f"inventory.{key} = {value}")
    for key, value in repository.waste_statistics().items():
        logger.info(f"waste.{key} = {value}")
    for ingredient in repository.list_low_stock_ingredients():
        logger.warning(f"Low stock: {ingredient}")
    for ingredient in repository.list_expiring_ingredients():
        logger.warning(f"Expiring: {ingredient}")

    save_repository(repository, STORAGE_FILE, backups=BackupManager(BACKUP_DIR))


if __name__ == "__main__":
    main()
