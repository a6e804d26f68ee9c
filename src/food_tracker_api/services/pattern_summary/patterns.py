"""
Deterministic pattern extraction over a day's logged food items.

The extracted numbers are handed to the summary model so that totals and
shares are computed here rather than by the model.
"""

from collections import Counter, defaultdict
from datetime import UTC, datetime
from typing import Any

from food_tracker_api.models.meals import MealRecord

# Tie-break order for the largest meal type
MEAL_TYPE_PRIORITY = {"breakfast": 0, "lunch": 1, "dinner": 2, "snack": 3}


def format_meal_time(logged_at: datetime | None) -> str:
    """Format a timestamp as ``h:MM AM/PM`` in its own UTC offset."""
    if logged_at is None:
        return "Unknown"
    hours = logged_at.hour
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{logged_at.minute:02d} {suffix}"


def _instant(meal: MealRecord) -> datetime:
    # Timestamps without an offset are treated as UTC for ordering only
    logged_at = meal.logged_at
    return logged_at if logged_at.tzinfo else logged_at.replace(tzinfo=UTC)


def _round1(value: float) -> float:
    return round(value * 10) / 10


def extract_patterns(meals: list[MealRecord]) -> dict[str, Any]:
    """
    Compute timing, size, macro and location patterns for a list of meals.

    Args:
        meals: Today's logged food items (not modified)

    Returns:
        Dict of patterns; empty for an empty list
    """
    if not meals:
        return {}

    patterns: dict[str, Any] = {
        "first_food_time": None,
        "latest_food_time": None,
        "largest_portion": None,
    }

    timed = sorted((m for m in meals if m.logged_at is not None), key=_instant)
    if timed:
        patterns["first_food_time"] = format_meal_time(timed[0].logged_at)
        patterns["latest_food_time"] = format_meal_time(timed[-1].logged_at)

    # First item wins on equal calories
    largest = meals[0]
    for meal in meals[1:]:
        if meal.calories > largest.calories:
            largest = meal
    patterns["largest_portion"] = {
        "meal_type": largest.meal_type,
        "calories": largest.calories,
        "portion_size": largest.portion_size,
    }

    ingredient_frequency: Counter[str] = Counter()
    for meal in meals:
        ingredient_frequency.update(meal.ingredients)
    patterns["ingredient_frequency"] = dict(ingredient_frequency)

    counts: Counter[str] = Counter()
    totals: dict[str, dict[str, float]] = defaultdict(
        lambda: {"protein": 0.0, "carbs": 0.0, "fat": 0.0, "calories": 0.0}
    )
    for meal in meals:
        meal_type = (meal.meal_type or "snack").lower()
        counts[meal_type] += 1
        bucket = totals[meal_type]
        bucket["protein"] += meal.protein
        bucket["carbs"] += meal.carbs
        bucket["fat"] += meal.fat
        bucket["calories"] += meal.calories

    patterns["meal_type_distribution"] = dict(counts)
    patterns["meal_type_macro_distribution"] = {
        meal_type: {
            "protein": _round1(bucket["protein"]),
            "carbs": _round1(bucket["carbs"]),
            "fat": _round1(bucket["fat"]),
            "calories": bucket["calories"],
        }
        for meal_type, bucket in totals.items()
    }

    total_calories = sum(bucket["calories"] for bucket in totals.values())
    patterns["total_macros"] = {
        "protein": _round1(sum(m.protein for m in meals)),
        "carbs": _round1(sum(m.carbs for m in meals)),
        "fat": _round1(sum(m.fat for m in meals)),
        "calories": total_calories,
    }

    patterns["meal_type_calorie_distribution"] = {}
    if total_calories > 0:
        for meal_type, bucket in totals.items():
            patterns["meal_type_calorie_distribution"][meal_type] = {
                "calories": bucket["calories"],
                "percentage": round(bucket["calories"] / total_calories * 100),
            }

        largest_type = _largest_meal_type(
            {meal_type: bucket["calories"] for meal_type, bucket in totals.items()}
        )
        if largest_type is not None:
            calories = totals[largest_type]["calories"]
            patterns["largest_meal_type"] = {
                "meal_type": largest_type,
                "calories": calories,
                "percentage": round(calories / total_calories * 100),
            }

    locations = Counter(
        meal.location for meal in meals if meal.location and meal.location != "home"
    )
    if locations:
        patterns["location_distribution"] = dict(locations)

    return patterns


def _largest_meal_type(calories_by_type: dict[str, float]) -> str | None:
    """Meal type with the most calories; ties go to the earlier meal of the day."""
    best: str | None = None
    best_calories = 0.0
    for meal_type, calories in calories_by_type.items():
        if calories <= 0:
            continue
        if calories > best_calories or (
            calories == best_calories
            and MEAL_TYPE_PRIORITY.get(meal_type, len(MEAL_TYPE_PRIORITY))
            < MEAL_TYPE_PRIORITY.get(best, len(MEAL_TYPE_PRIORITY))
        ):
            best = meal_type
            best_calories = calories
    return best
