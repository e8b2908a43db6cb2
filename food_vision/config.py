import os
from typing import Optional


def _parse_optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    return float(raw)


PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(PACKAGE_DIR, "data")

# -----------------------------------
# Detector / model configuration
# -----------------------------------

# YOLO_MODEL_PATH: ONNX export of YOLOv8l trained on Open Images V7 (601 classes).
# When the file is missing the loader degrades to the placeholder detector.
YOLO_MODEL_PATH = os.getenv(
    "YOLO_MODEL_PATH",
    os.path.abspath(os.path.join(PACKAGE_DIR, "..", "models", "yolov8l-oiv7_food.onnx")),
)

# MODEL_INPUT_SIZE: detector expects a square S x S RGB input.
MODEL_INPUT_SIZE = int(os.getenv("MODEL_INPUT_SIZE", "640"))

# PLACEHOLDER_ANCHORS / PLACEHOLDER_SEED: shape and seed of the placeholder
# detector output used when the real model cannot be loaded.
PLACEHOLDER_ANCHORS = int(os.getenv("PLACEHOLDER_ANCHORS", "8400"))
PLACEHOLDER_SEED = int(os.getenv("PLACEHOLDER_SEED", "0"))

# -----------------------------------
# Post-processing / portion configuration
# -----------------------------------

CONFIDENCE_THRESHOLD = float(os.getenv("CONFIDENCE_THRESHOLD", "0.4"))
MAX_DETECTIONS = int(os.getenv("MAX_DETECTIONS", "3"))

# NMS_IOU_THRESHOLD: empty (default) keeps overlap suppression disabled.
# Setting it (e.g. "0.5") enables greedy NMS and returns detections in
# confidence order instead of anchor order.
NMS_IOU_THRESHOLD = _parse_optional_float(os.getenv("NMS_IOU_THRESHOLD"))

# Grams for a box covering the whole frame; also the upper clamp.
MAX_WEIGHT_GRAMS = int(os.getenv("MAX_WEIGHT_GRAMS", "600"))
MIN_WEIGHT_GRAMS = int(os.getenv("MIN_WEIGHT_GRAMS", "50"))

# -----------------------------------
# Metadata tables
# -----------------------------------

CLASS_NAMES_PATH = os.getenv(
    "CLASS_NAMES_PATH", os.path.join(DATA_DIR, "oiv7_class_names.json")
)
NUTRITION_TABLE_PATH = os.getenv(
    "NUTRITION_TABLE_PATH", os.path.join(DATA_DIR, "food_kbzu.json")
)

# -----------------------------------
# Preprocessing
# -----------------------------------

# PREPROCESS_JPEG_QUALITY: quality of the intermediate JPEG re-encode (1..100).
PREPROCESS_JPEG_QUALITY = int(os.getenv("PREPROCESS_JPEG_QUALITY", "100"))

# -----------------------------------
# Remote vision worker
# -----------------------------------

REMOTE_WORKER_URL = os.getenv(
    "REMOTE_WORKER_URL", "https://vlm-for-food-abuser.goorbunoov22.workers.dev/"
)
REMOTE_TIMEOUT_S = float(os.getenv("REMOTE_TIMEOUT_S", "60"))
REMOTE_MAX_SIDE_PX = int(os.getenv("REMOTE_MAX_SIDE_PX", "1024"))
REMOTE_JPEG_QUALITY = int(os.getenv("REMOTE_JPEG_QUALITY", "80"))
