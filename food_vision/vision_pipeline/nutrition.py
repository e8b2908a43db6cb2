import logging
from typing import Iterable, Mapping

from food_vision.types import FoodItem, NutritionFacts, NutritionTotals, WeightedDetection
from food_vision.utils import round_half_up
from .food_schema import UNKNOWN_KEY, UNKNOWN_NUTRITION
from .metadata import NutritionTable, normalize_key
from .translations import RU_NAMES

logger = logging.getLogger(__name__)

_LAST_RESORT = NutritionFacts(**{k: float(v) for k, v in UNKNOWN_NUTRITION.items()})


def lookup_nutrition(class_name: str, nutrition_table: NutritionTable) -> NutritionFacts:
    """Per-100g facts for ``class_name``; never raises."""
    key = normalize_key(class_name or UNKNOWN_KEY)
    facts = nutrition_table.get(key)
    if facts is None:
        logger.debug("No nutrition entry for %r, using %r", key, UNKNOWN_KEY)
        facts = nutrition_table.get(UNKNOWN_KEY, _LAST_RESORT)
    return facts


def localized_name(class_name: str, translations: Mapping[str, str] = RU_NAMES) -> str:
    return translations.get(normalize_key(class_name), class_name)


def resolve_item(
    weighted: WeightedDetection,
    nutrition_table: NutritionTable,
    translations: Mapping[str, str] = RU_NAMES,
) -> FoodItem:
    """Scale per-100g nutrition by the estimated mass of one detection."""
    detection = weighted.detection
    grams = weighted.estimated_grams
    per_100g = lookup_nutrition(detection.class_name, nutrition_table)
    multiplier = grams / 100

    return FoodItem(
        name=detection.class_name or "Unknown Food",
        localized_name=localized_name(detection.class_name, translations),
        confidence=detection.confidence,
        grams=grams,
        calories=int(round_half_up(per_100g.calories * multiplier)),
        protein=round_half_up(per_100g.protein * multiplier, 1),
        fat=round_half_up(per_100g.fat * multiplier, 1),
        carbs=round_half_up(per_100g.carbs * multiplier, 1),
    )


def aggregate(items: Iterable[FoodItem]) -> NutritionTotals:
    """Sum item nutrition; float sums are rounded once, after summing."""
    calories = 0
    protein = fat = carbs = 0.0
    for item in items:
        calories += item.calories
        protein += item.protein
        fat += item.fat
        carbs += item.carbs

    return NutritionTotals(
        calories=calories,
        protein=round_half_up(protein, 1),
        fat=round_half_up(fat, 1),
        carbs=round_half_up(carbs, 1),
    )
