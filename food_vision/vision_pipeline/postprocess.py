"""
Raw YOLO predictions → food detections.

Each anchor row is ``[cx, cy, w, h, score_0 .. score_{C-1}]`` with normalized
coordinates. One label per anchor (argmax), then confidence filter, food
allow-list filter, optional NMS, and a cap on the count.

Without NMS, surviving detections keep anchor order and overlapping boxes of
the same object are not merged.
"""

import logging
from typing import AbstractSet, List, Optional

import numpy as np

from food_vision.types import Detection
from .metadata import FOOD_CLASS_IDS, UNKNOWN_CLASS_NAME, ClassTable

logger = logging.getLogger(__name__)


def box_iou(box: np.ndarray, others: np.ndarray) -> np.ndarray:
    """IoU between one ``(x, y, w, h)`` box and an (M, 4) array of boxes."""
    x1 = np.maximum(box[0], others[:, 0])
    y1 = np.maximum(box[1], others[:, 1])
    x2 = np.minimum(box[0] + box[2], others[:, 0] + others[:, 2])
    y2 = np.minimum(box[1] + box[3], others[:, 1] + others[:, 3])

    intersection = np.clip(x2 - x1, 0.0, None) * np.clip(y2 - y1, 0.0, None)
    union = box[2] * box[3] + others[:, 2] * others[:, 3] - intersection
    return np.where(union > 0, intersection / np.where(union > 0, union, 1.0), 0.0)


def non_max_suppression(boxes: np.ndarray, scores: np.ndarray, iou_threshold: float) -> np.ndarray:
    """Greedy NMS; returns kept indices in descending score order."""
    order = np.argsort(-scores, kind="stable")
    keep = []
    while order.size:
        current = order[0]
        keep.append(int(current))
        if order.size == 1:
            break
        rest = order[1:]
        ious = box_iou(boxes[current], boxes[rest])
        order = rest[ious <= iou_threshold]
    return np.asarray(keep, dtype=np.int64)


def decode_predictions(
    raw: np.ndarray,
    class_table: ClassTable,
    confidence_threshold: float = 0.4,
    allowed_ids: AbstractSet[int] = FOOD_CLASS_IDS,
    max_detections: int = 3,
    nms_iou_threshold: Optional[float] = None,
) -> List[Detection]:
    predictions = raw[0] if raw.ndim == 3 else raw
    if predictions.size == 0 or predictions.shape[-1] <= 4:
        logger.info("No predictions in batch")
        return []

    boxes_center = predictions[:, :4].astype(np.float64)
    scores = predictions[:, 4:]

    # np.argmax returns the lowest index on ties
    class_ids = np.argmax(scores, axis=1)
    confidences = scores[np.arange(scores.shape[0]), class_ids].astype(np.float64)

    # corner form, clipped to the image so every coordinate stays in [0, 1]
    half = boxes_center[:, 2:4] / 2
    top_left = np.clip(boxes_center[:, 0:2] - half, 0.0, 1.0)
    bottom_right = np.clip(boxes_center[:, 0:2] + half, 0.0, 1.0)
    boxes = np.concatenate([top_left, bottom_right - top_left], axis=1)

    confident = confidences >= confidence_threshold
    is_food = np.isin(class_ids, np.fromiter(allowed_ids, dtype=np.int64))
    keep = np.flatnonzero(confident & is_food)

    logger.info(
        "Parsed %d detections above threshold, %d food-related",
        int(np.count_nonzero(confident)),
        keep.size,
    )

    if nms_iou_threshold is not None and keep.size > 1:
        kept = non_max_suppression(boxes[keep], confidences[keep], nms_iou_threshold)
        keep = keep[kept]
        logger.info("NMS (iou=%.2f) kept %d detections", nms_iou_threshold, keep.size)

    keep = keep[:max_detections]

    detections = [
        Detection(
            box=(
                float(boxes[i, 0]),
                float(boxes[i, 1]),
                float(boxes[i, 2]),
                float(boxes[i, 3]),
            ),
            confidence=float(confidences[i]),
            class_id=int(class_ids[i]),
            class_name=class_table.get(int(class_ids[i]), UNKNOWN_CLASS_NAME),
        )
        for i in keep
    ]
    logger.info("Final count: %d detections", len(detections))
    return detections
