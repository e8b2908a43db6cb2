"""Records passed between pipeline stages and handed back to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

BoundingBox = Tuple[float, float, float, float]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class NutritionFacts:
    """Nutrition per 100 g."""

    calories: float
    protein: float
    fat: float
    carbs: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "fat": self.fat,
            "carbs": self.carbs,
        }


@dataclass(frozen=True)
class Detection:
    """A candidate object; ``box`` is normalized ``(x_min, y_min, width, height)``, clipped to the image."""

    box: BoundingBox
    confidence: float
    class_id: int
    class_name: str

    @property
    def area(self) -> float:
        return self.box[2] * self.box[3]


@dataclass(frozen=True)
class WeightedDetection:
    detection: Detection
    estimated_grams: int


@dataclass(frozen=True)
class FoodItem:
    name: str
    localized_name: str
    confidence: float
    grams: int
    calories: int
    protein: float
    fat: float
    carbs: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ru_name": self.localized_name,
            "confidence": self.confidence,
            "grams": self.grams,
            "calories": self.calories,
            "protein": self.protein,
            "fat": self.fat,
            "carbs": self.carbs,
        }


@dataclass(frozen=True)
class NutritionTotals:
    calories: int = 0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "fat": self.fat,
            "carbs": self.carbs,
        }


@dataclass(frozen=True)
class AnalysisResult:
    items: Tuple[FoodItem, ...]
    total: NutritionTotals
    timestamp: str = field(default_factory=utc_timestamp)
    error: Optional[str] = None
    source: str = "on_device"
    processing_times: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "items": [item.to_dict() for item in self.items],
            "total": self.total.to_dict(),
            "timestamp": self.timestamp,
            "source": self.source,
            "processing_times": dict(self.processing_times),
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class ModelHandle:
    """Loaded detector plus its warm-up state."""

    detector: Any
    is_placeholder: bool
    warmed_up: bool
    input_size: int
    loaded_at: str = field(default_factory=utc_timestamp)
