from datetime import datetime, timedelta, timezone
import json
import os
import tempfile
import unittest
from pathlib import Path

from smartfood.domain.exceptions import ValidationError
from smartfood.domain.Ingredient import Ingredient
from smartfood.domain.Meal import Meal, MealStatus, MealType
from smartfood.domain.Recipe import Difficulty, Recipe, Step
from smartfood.domain.Units import Unit
from smartfood.infra.Repository import Repository
from smartfood.infra.Repository_File import load_repository, repository_from_dict, save_repository
from smartfood.utilities.backup import BackupManager


class TestRepositoryFile(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "storage.json"
        self.repo = Repository()

        self.flour = Ingredient("Flour", 1000, Unit.GRAM, unit_price=0.002,
                                expiry_date=datetime(2027, 1, 1, tzinfo=timezone.utc),
                                nutritional_info={"calories": 3640})
        self.bread = Recipe("Bread", "Crusty loaf", Difficulty.HARD, servings=2)
        self.bread.add_ingredient(self.flour)
        self.bread.add_step(Step(1, "Knead", 15))
        self.bread.add_step(Step(2, "Bake", 40))
        self.dinner = Meal("Dinner", MealType.DINNER, servings=4,
                           planned_time=datetime(2026, 3, 1, 19, 0, tzinfo=timezone.utc))
        self.dinner.set_recipe(self.bread)
        self.dinner.set_status(MealStatus.SHOPPING)

        self.repo.add_ingredient(self.flour)
        self.repo.add_recipe(self.bread)
        self.repo.add_meal(self.dinner)

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_and_load(self):
        save_repository(self.repo, self.path)
        with open(self.path, 'r', encoding='utf-8') as f:
            document = json.load(f)
        self.assertEqual(sorted(document), ["ingredients", "meals", "recipes", "savedAt", "version"])
        self.assertEqual(document["ingredients"][0]["unit"], 0)

        loaded = Repository()
        self.assertTrue(load_repository(loaded, self.path))
        self.assertEqual(loaded.counts(), {'ingredients': 1, 'recipes': 1, 'meals': 1})

        flour = loaded.get_ingredient(self.flour.id)
        self.assertEqual(flour.to_dict(), self.flour.to_dict())
        bread = loaded.get_recipe(self.bread.id)
        self.assertEqual(bread.to_dict(), self.bread.to_dict())
        dinner = loaded.get_meal(self.dinner.id)
        self.assertIs(dinner.recipe, bread)
        self.assertIs(dinner.status, MealStatus.SHOPPING)
        self.assertEqual([i.quantity for i in dinner.ingredients], [2000])
        self.assertAlmostEqual(dinner.estimated_cost, 4.0)

    def test_save_load_save_is_stable(self):
        save_repository(self.repo, self.path)
        first = json.loads(self.path.read_text(encoding='utf-8'))
        loaded = Repository()
        load_repository(loaded, self.path)
        save_repository(loaded, self.path)
        second = json.loads(self.path.read_text(encoding='utf-8'))
        first.pop("savedAt")
        second.pop("savedAt")
        self.assertEqual(first, second)

    def test_missing_file_leaves_repository_unchanged(self):
        with self.assertLogs('smartfood.infra.Repository_File', level='WARNING'):
            self.assertFalse(load_repository(self.repo, Path(self.tmp.name) / "missing.json"))
        self.assertEqual(self.repo.counts(), {'ingredients': 1, 'recipes': 1, 'meals': 1})

    def test_invalid_json_raises(self):
        self.path.write_text("{not json", encoding='utf-8')
        with self.assertRaises(json.JSONDecodeError):
            load_repository(self.repo, self.path)
        self.assertEqual(self.repo.counts()['ingredients'], 1)

    def test_invalid_entity_aborts_load(self):
        document = {"ingredients": [{"name": "Salt", "quantity": -3}], "recipes": [], "meals": []}
        with self.assertRaises(ValidationError):
            repository_from_dict(self.repo, document)
        self.assertEqual(self.repo.counts()['ingredients'], 1)
        with self.assertRaises(ValidationError):
            repository_from_dict(self.repo, ["not", "a", "document"])

    def test_backups_on_overwrite(self):
        backups = BackupManager(Path(self.tmp.name) / "backups", keep=2)
        save_repository(self.repo, self.path, backups=backups)
        self.assertEqual(backups.list_backups(self.path), [])
        for _ in range(3):
            save_repository(self.repo, self.path, backups=backups)
        self.assertEqual(len(backups.list_backups(self.path)), 2)
        self.assertFalse(os.path.exists(str(self.path) + ".tmp"))
