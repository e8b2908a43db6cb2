"""Hosted vision worker client for food analysis.

Unlike the on-device pipeline, every failure here is raised to the caller.
"""

import base64
import logging
import os
import time
from dataclasses import replace
from functools import lru_cache
from io import BytesIO
from typing import Any, Dict, Optional

import requests
from PIL import Image

from food_vision import config
from food_vision.errors import (
    InvalidImageError,
    MalformedResponseError,
    RateLimitError,
    RemoteAnalysisError,
)
from food_vision.types import AnalysisResult, FoodItem, NutritionTotals
from food_vision.utils import to_number
from food_vision.vision_pipeline.preprocess import resolve_image_path

logger = logging.getLogger(__name__)

UNKNOWN_DISH_NAME = "Неизвестное блюдо"
RATE_LIMIT_MESSAGE = "Слишком много запросов. Попробуйте через минуту."
INVALID_IMAGE_MESSAGE = "Некорректное изображение. Попробуйте другое фото."


def _as_int_if_whole(value: float):
    return int(value) if float(value).is_integer() else value


def _normalize_item(raw: Dict[str, Any]) -> FoodItem:
    name = raw.get("name") or UNKNOWN_DISH_NAME
    return FoodItem(
        name=name,
        localized_name=raw.get("ru_name") or name,
        confidence=to_number(raw.get("confidence"), 0.5),
        grams=_as_int_if_whole(to_number(raw.get("grams"), 100)),
        calories=_as_int_if_whole(to_number(raw.get("calories"), 0)),
        protein=to_number(raw.get("protein"), 0),
        fat=to_number(raw.get("fat"), 0),
        carbs=to_number(raw.get("carbs"), 0),
    )


def _normalize_total(raw: Dict[str, Any]) -> NutritionTotals:
    return NutritionTotals(
        calories=_as_int_if_whole(to_number(raw.get("calories"), 0)),
        protein=to_number(raw.get("protein"), 0),
        fat=to_number(raw.get("fat"), 0),
        carbs=to_number(raw.get("carbs"), 0),
    )


def parse_worker_response(payload: Any) -> AnalysisResult:
    """
    Validate and normalize a worker response body.

    Missing names become "Неизвестное блюдо", ``ru_name`` falls back to
    ``name``, missing or zero grams become 100 and confidence 0.5; every other
    number defaults to 0.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Invalid response format: expected JSON object")

    if payload.get("error"):
        raise RemoteAnalysisError(str(payload["error"]))

    items = payload.get("items")
    if not isinstance(items, list):
        raise MalformedResponseError("Invalid response format: missing items array")

    total = payload.get("total")
    if not isinstance(total, dict):
        raise MalformedResponseError("Invalid response format: missing total object")

    normalized = tuple(
        _normalize_item(item if isinstance(item, dict) else {}) for item in items
    )
    return AnalysisResult(
        items=normalized,
        total=_normalize_total(total),
        source="remote",
    )


class RemoteVisionClient:
    """Posts a compressed base64 JPEG to the vision worker and parses the reply."""

    def __init__(
        self,
        url: str = config.REMOTE_WORKER_URL,
        timeout: float = config.REMOTE_TIMEOUT_S,
        max_side_px: int = config.REMOTE_MAX_SIDE_PX,
        jpeg_quality: int = config.REMOTE_JPEG_QUALITY,
    ):
        self.url = url
        self.timeout = timeout
        self.max_side_px = max_side_px
        self.jpeg_quality = jpeg_quality

    def encode_image(self, image_path: str) -> str:
        """Resize to max_side x max_side, JPEG-encode and return base64 text."""
        path = resolve_image_path(image_path)
        if not os.path.isfile(path):
            raise RemoteAnalysisError("Image file not found")

        try:
            with Image.open(path) as img:
                rgb = img.convert("RGB")
        except OSError as e:
            raise InvalidImageError(INVALID_IMAGE_MESSAGE) from e

        resized = rgb.resize((self.max_side_px, self.max_side_px), Image.BILINEAR)
        buffer = BytesIO()
        resized.save(buffer, format="JPEG", quality=self.jpeg_quality)
        encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
        logger.info("[REMOTE] Image compressed, base64 length=%d", len(encoded))
        return encoded

    def analyze_food_image(self, image_path: str) -> AnalysisResult:
        logger.info("[REMOTE] Starting food analysis for %s", image_path)
        image_b64 = self.encode_image(image_path)

        start = time.time()
        try:
            response = requests.post(
                self.url,
                json={"image": image_b64},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("[REMOTE] Worker request failed: %s", e)
            raise RemoteAnalysisError(f"Ошибка анализа: {e}") from e
        duration_ms = round((time.time() - start) * 1000, 2)
        logger.info(
            "[REMOTE] Worker responded with status %s in %sms",
            response.status_code,
            duration_ms,
        )

        if not response.ok:
            self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError("Invalid response format: body is not JSON") from e

        result = replace(
            parse_worker_response(payload),
            processing_times={"remote_ms": duration_ms},
        )
        logger.info(
            "[REMOTE] Found %d items, total calories=%s",
            len(result.items),
            result.total.calories,
        )
        return result

    def check_service_availability(self) -> bool:
        try:
            response = requests.options(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("[REMOTE] Service unavailable: %s", e)
            return False
        return response.ok

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        error_message: Optional[str] = None
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("error"):
                error_message = str(body["error"])
        except ValueError:
            pass
        error_message = error_message or f"HTTP {response.status_code}"
        logger.error("[REMOTE] Worker error: %s", error_message)

        if response.status_code == 429:
            raise RateLimitError(RATE_LIMIT_MESSAGE, status_code=429)
        if response.status_code == 400:
            raise InvalidImageError(INVALID_IMAGE_MESSAGE, status_code=400)
        raise RemoteAnalysisError(
            f"Ошибка анализа: {error_message}", status_code=response.status_code
        )


@lru_cache
def get_remote_client() -> RemoteVisionClient:
    logger.info("Initializing remote vision client for %s", config.REMOTE_WORKER_URL)
    return RemoteVisionClient()
