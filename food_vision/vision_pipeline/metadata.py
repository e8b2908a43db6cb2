"""
Detector metadata: class names, the food allow-list and nutrition per 100 g.

Tables are built once, validated, and exposed as read-only mappings.
"""

import json
import logging
import re
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from food_vision.errors import TableValidationError
from food_vision.types import NutritionFacts
from .food_schema import FOOD_NUTRITION, UNKNOWN_KEY, UNKNOWN_NUTRITION
from .oiv7_classes import OIV7_CLASS_NAMES

logger = logging.getLogger(__name__)

ClassTable = Mapping[int, str]
NutritionTable = Mapping[str, NutritionFacts]

UNKNOWN_CLASS_NAME = "Unknown"
NUTRITION_FIELDS = ("calories", "protein", "fat", "carbs")

# Food-related ids out of the 601 Open Images V7 classes
# (Apple, Bagel, Banana, Bread, Pizza, Salad, ...).
FOOD_CLASS_IDS = frozenset(
    {
        10, 16, 17, 21, 37, 39, 60, 65, 67, 72, 76, 78, 86, 89, 92, 105, 108,
        117, 119, 120, 132, 140, 143, 146, 151, 154, 166, 171, 178, 186, 192,
        199, 204, 207, 210, 213, 226, 227, 229, 233, 256, 273, 287, 306, 323,
        333, 344, 347, 356, 365, 372, 373, 374, 375, 389, 391, 400, 404, 407,
        409, 414, 430, 433, 445, 459, 468, 496, 501, 507, 518, 521, 523, 540,
        566, 571, 579, 589, 600,
    }
)

_WHITESPACE = re.compile(r"\s+")


def normalize_key(name: str) -> str:
    """Lowercase and collapse internal whitespace into a single ``_``."""
    return _WHITESPACE.sub("_", (name or "").strip().lower())


def _reject_duplicates(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise TableValidationError(f"Duplicate key in table: {key!r}")
        result[key] = value
    return result


def _read_json_object(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f, object_pairs_hook=_reject_duplicates)
    if not isinstance(data, dict):
        raise TableValidationError(f"Table at {path} is not a JSON object")
    return data


# -----------------------------------
# Class table
# -----------------------------------


def build_class_table(raw: Mapping[Any, str]) -> ClassTable:
    """Validate ``id -> name`` pairs; ids must be exactly ``0..N-1``."""
    table: Dict[int, str] = {}
    for key, name in raw.items():
        try:
            class_id = int(key)
        except (TypeError, ValueError) as e:
            raise TableValidationError(f"Class id is not an integer: {key!r}") from e
        if class_id in table:
            raise TableValidationError(f"Duplicate class id: {class_id}")
        if not isinstance(name, str) or not name.strip():
            raise TableValidationError(f"Empty class name for id {class_id}")
        table[class_id] = name

    if sorted(table) != list(range(len(table))):
        raise TableValidationError("Class ids must be contiguous starting at 0")

    return MappingProxyType(dict(sorted(table.items())))


def embedded_class_table() -> ClassTable:
    return build_class_table(dict(enumerate(OIV7_CLASS_NAMES)))


def load_class_table(path: str) -> ClassTable:
    """
    Load the detector class table.

    Falls back to the embedded Open Images V7 names when the file is missing
    or invalid, so the table always matches the detector output width.
    """
    try:
        table = build_class_table(_read_json_object(path))
    except (OSError, ValueError) as e:
        logger.error("Failed to load class names from %s: %s", path, e)
        table = embedded_class_table()
        logger.warning("Using embedded class names: %d classes", len(table))
        return table

    logger.info("Class names loaded from %s: %d classes", path, len(table))
    return table


# -----------------------------------
# Nutrition table
# -----------------------------------


def _to_facts(key: str, entry: Any) -> NutritionFacts:
    if not isinstance(entry, Mapping):
        raise TableValidationError(f"Nutrition entry for {key!r} is not an object")

    values = {}
    for field_name in NUTRITION_FIELDS:
        if field_name not in entry:
            raise TableValidationError(f"Nutrition entry {key!r} misses {field_name!r}")
        value = entry[field_name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TableValidationError(
                f"Nutrition entry {key!r} has non-numeric {field_name!r}: {value!r}"
            )
        if value < 0:
            raise TableValidationError(
                f"Nutrition entry {key!r} has negative {field_name!r}: {value!r}"
            )
        values[field_name] = float(value)
    return NutritionFacts(**values)


def build_nutrition_table(raw: Mapping[str, Any]) -> NutritionTable:
    """Normalize keys, validate entries and guarantee the ``unknown`` row."""
    table: Dict[str, NutritionFacts] = {}
    for name, entry in raw.items():
        key = normalize_key(name)
        if not key:
            raise TableValidationError(f"Empty nutrition key: {name!r}")
        if key in table:
            raise TableValidationError(
                f"Nutrition key {name!r} collides with an existing key after normalization"
            )
        table[key] = _to_facts(key, entry)

    table.setdefault(UNKNOWN_KEY, _to_facts(UNKNOWN_KEY, UNKNOWN_NUTRITION))
    return MappingProxyType(table)


def embedded_nutrition_table() -> NutritionTable:
    return build_nutrition_table(FOOD_NUTRITION)


def load_nutrition_table(path: str) -> NutritionTable:
    """Load the full table from ``path``; fall back to the embedded one."""
    try:
        table = build_nutrition_table(_read_json_object(path))
    except (OSError, ValueError) as e:
        logger.warning(
            "Could not load food database from %s (%s); falling back to embedded database",
            path,
            e,
        )
        table = embedded_nutrition_table()
        logger.info("Embedded food database loaded: %d entries", len(table))
        return table

    logger.info("Full food database loaded from %s: %d entries", path, len(table))
    return table
