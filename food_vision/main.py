"""Main FastAPI application."""

import asyncio
import logging
import os
import sys
import tempfile
import time
from contextlib import suppress

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from food_vision.errors import InvalidImageError, RateLimitError, RemoteAnalysisError
from food_vision.remote_vision import get_remote_client
from food_vision.vision_pipeline import FoodRecognitionPipeline

# -----------------------------------
# App initialization
# -----------------------------------

app = FastAPI()

logging.basicConfig(
    level=logging.INFO,
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)

# The model is loaded lazily on the first /analyze request.
pipeline = FoodRecognitionPipeline()

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png")
UPLOAD_DIR = os.path.join(tempfile.gettempdir(), "food_vision")

# -----------------------------------
# CORS
# -----------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _save_upload(image: UploadFile) -> str:
    if not image:
        raise HTTPException(422, "Image field is required")

    if image.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(422, "Unsupported format (use jpeg/png)")

    os.makedirs(UPLOAD_DIR, exist_ok=True)
    suffix = ".png" if image.content_type == "image/png" else ".jpg"
    content = await image.read()
    with tempfile.NamedTemporaryFile(dir=UPLOAD_DIR, suffix=suffix, delete=False) as f:
        f.write(content)
    logger.info("[PIPELINE] Saved input image: %s", f.name)
    return f.name


def _remove(path: str) -> None:
    with suppress(OSError):
        os.remove(path)


# -----------------------------------
# Technical endpoints
# -----------------------------------

@app.get("/health")
def health():
    return {"status": "ok", "model_loaded": pipeline.loader.is_loaded()}


# -----------------------------------
# /analyze: on-device YOLO pipeline
# -----------------------------------

@app.post("/analyze")
async def analyze_photo(image: UploadFile = File(None)):
    """
    Detector → portions → nutrition. Always answers 200; failures come back
    as the fallback result with an ``error`` field.
    """
    total_start = time.time()
    temp_input = await _save_upload(image)
    logger.info("[PIPELINE] Starting /analyze endpoint for file: %s", image.filename)

    try:
        result = await pipeline.analyze_food(temp_input)
    finally:
        _remove(temp_input)

    logger.info(
        "[PIPELINE] /analyze completed, source=%s, items=%d, total time: %sms",
        result.source,
        len(result.items),
        round((time.time() - total_start) * 1000, 2),
    )
    return result.to_dict()


# -----------------------------------
# /analyze/remote: hosted vision worker
# -----------------------------------

@app.post("/analyze/remote")
async def analyze_photo_remote(image: UploadFile = File(None)):
    temp_input = await _save_upload(image)
    logger.info("[PIPELINE] Starting /analyze/remote endpoint for file: %s", image.filename)

    try:
        result = await asyncio.to_thread(get_remote_client().analyze_food_image, temp_input)
    except RateLimitError as e:
        raise HTTPException(429, str(e))
    except InvalidImageError as e:
        raise HTTPException(400, str(e))
    except RemoteAnalysisError as e:
        logger.error("[PIPELINE] Remote analysis failed: %s", e)
        raise HTTPException(502, str(e))
    finally:
        _remove(temp_input)

    return result.to_dict()
