from datetime import timedelta
import unittest

from smartfood.domain.exceptions import InvalidArgumentError, NotFoundError
from smartfood.domain.Ingredient import Ingredient
from smartfood.domain.Recipe import Difficulty, Recipe, Step
from smartfood.domain.Units import Unit


def descriptions(recipe):
    return [step.description for step in recipe.steps]


def orders(recipe):
    return [step.order for step in recipe.steps]


class TestRecipe(unittest.TestCase):

    def setUp(self):
        self.flour = Ingredient("Flour", 1000, Unit.GRAM, unit_price=0.002,
                                nutritional_info={"calories": 3640, "protein": 100})
        self.water = Ingredient("Water", 600, Unit.MILLILITER, unit_price=0.0)
        self.yeast = Ingredient("Yeast", 7, Unit.GRAM, unit_price=0.05,
                                nutritional_info={"calories": 20, "protein": 3})
        self.bread = Recipe("Bread", "Simple white loaf", Difficulty.MEDIUM)
        for index, text in enumerate(["mix", "knead", "bake"], start=1):
            self.bread.add_step(Step(index, text, 10 * index))

    def test_bread_end_to_end(self):
        self.assertAlmostEqual(self.flour.cost(), 2.0)
        self.bread.add_ingredient(self.flour)
        self.assertAlmostEqual(self.bread.total_cost(), 2.0)
        self.bread.scale_servings(3)
        self.assertEqual(self.bread.servings, 3)
        self.assertEqual(self.bread.ingredients[0].quantity, 3000)
        self.assertAlmostEqual(self.bread.total_cost(), 6.0)
        # the recipe works on its own copy
        self.assertEqual(self.flour.quantity, 1000)

    def test_duplicate_ingredient_id_rejected(self):
        self.bread.add_ingredient(self.flour)
        with self.assertRaises(InvalidArgumentError):
            self.bread.add_ingredient(self.flour)
        self.bread.add_ingredient(Ingredient("Flour", 200, Unit.GRAM))
        self.assertEqual(len(self.bread.ingredients), 2)

    def test_nutrients_follow_ingredient_list(self):
        self.bread.add_ingredient(self.flour)
        self.bread.add_ingredient(self.yeast)
        self.bread.add_ingredient(self.water)
        self.assertEqual(self.bread.nutritional_info, {"calories": 3660, "protein": 103})
        self.bread.remove_ingredient(self.flour.id)
        self.assertEqual(self.bread.nutritional_info, {"calories": 20, "protein": 3})
        with self.assertRaises(NotFoundError):
            self.bread.remove_ingredient("ing_missing")

    def test_scale_servings_scales_nutrients(self):
        self.bread.servings = 2
        self.bread.add_ingredient(self.flour)
        self.bread.scale_servings(4)
        self.assertEqual(self.bread.ingredients[0].quantity, 2000)
        self.assertEqual(self.bread.nutritional_info["calories"], 7280)

    def test_scale_servings_validation(self):
        self.bread.add_ingredient(self.flour)
        with self.assertRaises(InvalidArgumentError):
            self.bread.scale_servings(0)
        with self.assertRaises(InvalidArgumentError):
            self.bread.scale_servings(-2)
        self.bread.scale_servings(1)
        self.assertEqual(self.bread.ingredients[0].quantity, 1000)
        with self.assertRaises(InvalidArgumentError):
            self.bread.servings = 0
        with self.assertRaises(InvalidArgumentError):
            Recipe("Soup", servings=0)

    def test_fractional_servings_rejected(self):
        with self.assertRaises(InvalidArgumentError):
            Recipe("Soup", servings=0.5)
        with self.assertRaises(InvalidArgumentError):
            self.bread.servings = 1.5
        with self.assertRaises(InvalidArgumentError):
            self.bread.servings = True
        self.bread.add_ingredient(self.flour)
        with self.assertRaises(InvalidArgumentError):
            self.bread.scale_servings(2.5)
        self.assertEqual(self.bread.servings, 1)
        self.assertEqual(self.bread.ingredients[0].quantity, 1000)
        self.bread.scale_servings(2)
        self.assertEqual(self.bread.ingredients[0].quantity, 2000)

    def test_add_step_shifts_on_collision(self):
        self.bread.add_step(Step(2, "rest"))
        self.assertEqual(descriptions(self.bread), ["mix", "rest", "knead", "bake"])
        self.assertEqual(orders(self.bread), [1, 2, 3, 4])

    def test_add_step_past_end_is_renumbered(self):
        self.bread.add_step(Step(10, "cool"))
        self.assertEqual(orders(self.bread), [1, 2, 3, 4])
        self.assertEqual(descriptions(self.bread)[-1], "cool")
        with self.assertRaises(InvalidArgumentError):
            self.bread.add_step(Step(0, "nope"))

    def test_remove_step_renumbers(self):
        self.bread.add_step(Step(4, "cool"))
        self.bread.remove_step(2)
        self.assertEqual(descriptions(self.bread), ["mix", "bake", "cool"])
        self.assertEqual(orders(self.bread), [1, 2, 3])
        with self.assertRaises(NotFoundError):
            self.bread.remove_step(9)

    def test_reorder_step(self):
        self.bread.reorder_step(1, 3)
        self.assertEqual(descriptions(self.bread), ["knead", "bake", "mix"])
        self.bread.reorder_step(3, 1)
        self.assertEqual(descriptions(self.bread), ["mix", "knead", "bake"])
        self.bread.reorder_step(2, 99)
        self.assertEqual(descriptions(self.bread), ["mix", "bake", "knead"])
        self.assertEqual(orders(self.bread), [1, 2, 3])

    def test_reorder_step_always_contiguous(self):
        for old in range(1, 6):
            for new in range(1, 7):
                recipe = Recipe("Stew")
                for index in range(1, 6):
                    recipe.add_step(Step(index, f"s{index}"))
                recipe.reorder_step(old, new)
                self.assertEqual(orders(recipe), [1, 2, 3, 4, 5])
                self.assertEqual(sorted(descriptions(recipe)), [f"s{i}" for i in range(1, 6)])
                self.assertEqual(descriptions(recipe)[min(new, 5) - 1], f"s{old}")

    def test_reorder_step_validation(self):
        with self.assertRaises(InvalidArgumentError):
            self.bread.reorder_step(0, 1)
        with self.assertRaises(InvalidArgumentError):
            self.bread.reorder_step(1, -1)
        with self.assertRaises(InvalidArgumentError):
            self.bread.reorder_step(7, 1)

    def test_total_time(self):
        self.assertEqual(self.bread.total_time(), timedelta(minutes=60))

    def test_is_valid(self):
        self.assertFalse(self.bread.is_valid())
        self.bread.add_ingredient(self.flour)
        self.assertTrue(self.bread.is_valid())
        self.assertFalse(Recipe("Empty").is_valid())

    def test_matches(self):
        self.assertTrue(self.bread.matches("BREAD"))
        self.assertTrue(self.bread.matches("white"))
        self.assertFalse(self.bread.matches("cake"))

    def test_clone_is_independent(self):
        self.bread.add_ingredient(self.flour)
        copy = self.bread.clone()
        copy.scale_servings(2)
        copy.remove_step(1)
        self.assertEqual(copy.id, self.bread.id)
        self.assertEqual(self.bread.ingredients[0].quantity, 1000)
        self.assertEqual(len(self.bread.steps), 3)

    def test_to_dict_from_dict(self):
        self.bread.add_ingredient(self.flour)
        self.bread.add_ingredient(self.yeast)
        data = self.bread.to_dict()
        self.assertEqual(data["difficulty"], 1)
        self.assertEqual(data["steps"][1], {"order": 2, "description": "knead", "durationMinutes": 20})
        restored = Recipe.from_dict(data)
        self.assertEqual(restored.id, self.bread.id)
        self.assertIs(restored.difficulty, Difficulty.MEDIUM)
        self.assertEqual(descriptions(restored), ["mix", "knead", "bake"])
        self.assertEqual(restored.nutritional_info, self.bread.nutritional_info)
        self.assertEqual(restored.to_dict(), data)
