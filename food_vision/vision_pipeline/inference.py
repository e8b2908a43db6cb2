import logging
from typing import Optional

import numpy as np

from food_vision.errors import InferenceError
from food_vision.types import ModelHandle

logger = logging.getLogger(__name__)


def _as_anchor_rows(output: np.ndarray, num_classes: Optional[int]) -> np.ndarray:
    """Bring detector output into (1, N, 4 + C) layout."""
    if output.ndim == 2:
        output = output[None]
    if output.ndim != 3 or output.shape[0] != 1:
        raise InferenceError(f"Unexpected detector output shape: {output.shape}")

    _, dim1, dim2 = output.shape
    if num_classes is not None:
        width = 4 + num_classes
        if dim2 == width:
            return output
        if dim1 == width:
            return output.transpose(0, 2, 1)
        raise InferenceError(
            f"Detector output {output.shape} does not match {num_classes} classes"
        )

    # Without a class count, anchors outnumber channels in every YOLO export.
    return output.transpose(0, 2, 1) if dim1 < dim2 else output


def run_inference(
    tensor: np.ndarray,
    handle: ModelHandle,
    num_classes: Optional[int] = None,
) -> np.ndarray:
    """
    Forward pass; returns a detached float32 array of shape (1, N, 4 + C).

    The input tensor and every intermediate output are dropped before
    returning, on success and on failure alike.
    """
    logger.debug("Running inference, input shape: %s", tensor.shape)
    outputs = None
    try:
        outputs = handle.detector.predict(tensor)
        if not outputs:
            raise InferenceError("Detector returned no outputs")
        rows = _as_anchor_rows(np.asarray(outputs[0]), num_classes)
        raw = np.array(rows, dtype=np.float32, copy=True, order="C")
    except InferenceError:
        raise
    except Exception as e:
        raise InferenceError(f"Inference failed: {e}") from e
    finally:
        if isinstance(outputs, list):
            outputs.clear()
        outputs = None
        tensor = None

    logger.debug("Inference complete, predictions shape: %s", raw.shape)
    return raw
