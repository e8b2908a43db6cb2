from typing import Iterable, List

from food_vision.types import Detection, WeightedDetection
from food_vision.utils import round_half_up


def estimate_grams(detection: Detection, max_weight_grams: int = 600, min_weight_grams: int = 50) -> int:
    """
    Heuristic portion mass from the normalized box area.

    grams = round(width * height * max_weight_grams), clamped to
    [min_weight_grams, max_weight_grams]. Not calibrated against real object
    scale or camera distance.
    """
    area = max(0.0, detection.area)
    grams = int(round_half_up(area * max_weight_grams))
    return max(min_weight_grams, min(max_weight_grams, grams))


def estimate_portions(
    detections: Iterable[Detection],
    max_weight_grams: int = 600,
    min_weight_grams: int = 50,
) -> List[WeightedDetection]:
    return [
        WeightedDetection(
            detection=det,
            estimated_grams=estimate_grams(det, max_weight_grams, min_weight_grams),
        )
        for det in detections
    ]
