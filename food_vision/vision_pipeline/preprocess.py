import logging
import os
from io import BytesIO
from urllib.parse import unquote, urlparse

import numpy as np
from PIL import Image, UnidentifiedImageError

from food_vision.errors import FormatError, ImageAccessError

logger = logging.getLogger(__name__)


def resolve_image_path(image_ref: str) -> str:
    """Accept plain paths and ``file://`` URIs from the capture/picker service."""
    if image_ref.startswith("file://"):
        return unquote(urlparse(image_ref).path)
    return image_ref


def preprocess_image(image_ref: str, input_size: int = 640, jpeg_quality: int = 100) -> np.ndarray:
    """
    Load photo → hard resize to input_size x input_size → JPEG re-encode →
    float32 RGB tensor of shape (1, input_size, input_size, 3) in [0, 1].

    The source file is closed before the tensor is returned.
    """
    path = resolve_image_path(image_ref)
    if not os.path.isfile(path):
        raise ImageAccessError(f"Image file not found: {path}")

    try:
        with Image.open(path) as img:
            img.load()
            rgb = img.convert("RGB")
    except UnidentifiedImageError as e:
        raise FormatError(f"Unsupported image format: {path}") from e
    except OSError as e:
        raise ImageAccessError(f"Cannot read image {path}: {e}") from e

    w, h = rgb.size
    resized = rgb.resize((input_size, input_size), Image.BILINEAR)

    buffer = BytesIO()
    resized.save(buffer, format="JPEG", quality=jpeg_quality)
    buffer.seek(0)
    with Image.open(buffer) as encoded:
        arr = np.asarray(encoded.convert("RGB"), dtype=np.float32) / 255.0

    logger.debug(
        "Preprocessed image: original_size=%sx%s, tensor_shape=%s",
        w,
        h,
        (1,) + arr.shape,
    )
    return arr[None]
