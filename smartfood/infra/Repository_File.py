"""Repository persistence helpers (JSON file).

The Repository itself knows nothing about files: saving works on
`Repository.snapshot()` and loading hands finished entities to
`Repository.replace_all()`, so no file I/O ever runs under its lock.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from smartfood.domain.Ingredient import Ingredient
from smartfood.domain.Meal import Meal
from smartfood.domain.Recipe import Recipe
from smartfood.domain.exceptions import ValidationError
from smartfood.infra.Repository import Repository
from smartfood.utilities.backup import BackupManager
from smartfood.utilities.clock import to_epoch, utc_now
from smartfood.utilities.constants import STORAGE_FORMAT_VERSION

logger = logging.getLogger(__name__)


def repository_to_dict(repository: Repository):
    ingredients, recipes, meals = repository.snapshot()
    return {
        "version": STORAGE_FORMAT_VERSION,
        "savedAt": to_epoch(utc_now()),
        "ingredients": [ing.to_dict() for ing in ingredients],
        "recipes": [rec.to_dict() for rec in recipes],
        "meals": [meal.to_dict() for meal in meals],
    }


def repository_from_dict(repository: Repository, data):
    """Rebuild all entities from data and swap them into repository in one step."""
    if not isinstance(data, dict):
        raise ValidationError("Storage document must be a JSON object", field="root")
    ingredients = [Ingredient.from_dict(entry) for entry in data.get("ingredients", [])]
    recipes = [Recipe.from_dict(entry) for entry in data.get("recipes", [])]
    by_id = {recipe.id: recipe for recipe in recipes}
    meals = [Meal.from_dict(entry, recipes=by_id) for entry in data.get("meals", [])]
    repository.replace_all(ingredients, recipes, meals)


def save_repository(repository: Repository, path: Path, backups: Optional[BackupManager] = None) -> Path:
    """Write the repository to path as JSON, backing up the previous file when backups is given."""
    path = Path(path)
    document = repository_to_dict(repository)
    if backups is not None:
        backups.create_backup(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
    tmp_path.replace(path)
    logger.info(f"Saved {len(document['ingredients'])} ingredients, {len(document['recipes'])} recipes, "
                f"{len(document['meals'])} meals to {path}")
    return path


def load_repository(repository: Repository, path: Path) -> bool:
    """Load path into repository. Returns False (repository untouched) when the file does not exist."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Storage file not found: {path}. Repository left unchanged.")
        return False
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in storage file {path}: {e}")
        raise
    repository_from_dict(repository, document)
    logger.info(f"Loaded repository from {path}")
    return True
