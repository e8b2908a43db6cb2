import asyncio
import logging
import time
from typing import Dict, Optional

from food_vision import config
from food_vision.errors import PipelineError
from food_vision.types import AnalysisResult, FoodItem, NutritionTotals
from .inference import run_inference
from .loader import ModelLoader
from .nutrition import aggregate, resolve_item
from .portions import estimate_portions
from .postprocess import decode_predictions
from .preprocess import preprocess_image

logger = logging.getLogger(__name__)

FALLBACK_DISH_NAME = "Смешанное блюдо"


def fallback_result(message: str) -> AnalysisResult:
    """Fixed single-item result returned when on-device analysis fails."""
    item = FoodItem(
        name=FALLBACK_DISH_NAME,
        localized_name=FALLBACK_DISH_NAME,
        confidence=0.5,
        grams=250,
        calories=375,
        protein=25.0,
        fat=17.5,
        carbs=37.5,
    )
    return AnalysisResult(
        items=(item,),
        total=NutritionTotals(calories=375, protein=25.0, fat=17.5, carbs=37.5),
        error=message or "Analysis failed",
        source="fallback",
    )


def _ms(start: float, end: float) -> float:
    return round((end - start) * 1000, 2)


class FoodRecognitionPipeline:
    """
    On-device food recognition:

    photo
      ↓
    preprocess (hard resize to S x S, normalize to [0, 1])
      ↓
    YOLO detector (1, N, 4 + C)
      ↓
    decode (argmax label, confidence + food allow-list, cap)
      ↓
    grams from box area
      ↓
    nutrition per 100g → per item
      ↓
    totals

    The caller owns the instance (and with it the loaded model). Failures in
    any stage produce the fixed fallback result instead of an exception.
    """

    def __init__(
        self,
        loader: Optional[ModelLoader] = None,
        confidence_threshold: float = config.CONFIDENCE_THRESHOLD,
        max_detections: int = config.MAX_DETECTIONS,
        max_weight_grams: int = config.MAX_WEIGHT_GRAMS,
        min_weight_grams: int = config.MIN_WEIGHT_GRAMS,
        nms_iou_threshold: Optional[float] = config.NMS_IOU_THRESHOLD,
        jpeg_quality: int = config.PREPROCESS_JPEG_QUALITY,
    ):
        self.loader = loader or ModelLoader()
        self.confidence_threshold = confidence_threshold
        self.max_detections = max_detections
        self.max_weight_grams = max_weight_grams
        self.min_weight_grams = min_weight_grams
        self.nms_iou_threshold = nms_iou_threshold
        self.jpeg_quality = jpeg_quality

    async def analyze_food(self, image_path: str) -> AnalysisResult:
        logger.info("[PIPELINE] Starting food analysis for %s", image_path)
        try:
            return await self._analyze(image_path)
        except PipelineError as e:
            logger.error("[PIPELINE] Analysis failed (kind=%s): %s", e.kind.value, e)
            return fallback_result(str(e))
        except Exception as e:
            logger.exception("[PIPELINE] Error analyzing food")
            return fallback_result(str(e))

    def analyze_food_sync(self, image_path: str) -> AnalysisResult:
        return asyncio.run(self.analyze_food(image_path))

    def is_model_loaded(self) -> bool:
        return self.loader.is_loaded()

    async def unload_model(self) -> None:
        await self.loader.unload()

    async def _analyze(self, image_path: str) -> AnalysisResult:
        t0 = time.perf_counter()

        # 1) Model + metadata
        handle = await self.loader.ensure_loaded()
        class_table = self.loader.class_table
        nutrition_table = self.loader.nutrition_table
        t_loaded = time.perf_counter()

        # 2) Preprocess
        tensor = await asyncio.to_thread(
            preprocess_image, image_path, handle.input_size, self.jpeg_quality
        )
        t_preprocessed = time.perf_counter()
        logger.info("[PIPELINE] Step 2: Preprocessing completed in %sms", _ms(t_loaded, t_preprocessed))

        # 3) Inference; ownership of the tensor moves to the runner
        raw = await asyncio.to_thread(run_inference, tensor, handle, len(class_table))
        del tensor
        t_inferred = time.perf_counter()
        logger.info(
            "[PIPELINE] Step 3: Inference completed in %sms (placeholder=%s)",
            _ms(t_preprocessed, t_inferred),
            handle.is_placeholder,
        )

        # 4) Post-processing
        detections = decode_predictions(
            raw,
            class_table,
            confidence_threshold=self.confidence_threshold,
            max_detections=self.max_detections,
            nms_iou_threshold=self.nms_iou_threshold,
        )
        del raw
        t_decoded = time.perf_counter()

        # 5-6) Portions and nutrition
        weighted = estimate_portions(detections, self.max_weight_grams, self.min_weight_grams)
        items = tuple(resolve_item(w, nutrition_table) for w in weighted)
        t_resolved = time.perf_counter()

        # 7) Totals
        total = aggregate(items)
        t_done = time.perf_counter()

        processing_times: Dict[str, float] = {
            "load_ms": _ms(t0, t_loaded),
            "preprocess_ms": _ms(t_loaded, t_preprocessed),
            "inference_ms": _ms(t_preprocessed, t_inferred),
            "postprocess_ms": _ms(t_inferred, t_decoded),
            "nutrition_ms": _ms(t_decoded, t_resolved),
            "total_ms": _ms(t0, t_done),
        }
        logger.info("[PIPELINE] Found %d food items, timings_ms=%s", len(items), processing_times)

        return AnalysisResult(
            items=items,
            total=total,
            source="on_device",
            processing_times=processing_times,
        )
