from mealplan.models.dishes import Dish
from mealplan.models.plans import MealBlock, MealItem, MealPlan

__all__ = ["Dish", "MealBlock", "MealItem", "MealPlan"]
