import logging
import os
from typing import List, Protocol

import numpy as np

logger = logging.getLogger(__name__)


class Detector(Protocol):
    """
    Anything that turns a ``float32[1, S, S, 3]`` tensor into raw predictions.

    ``predict`` returns the model outputs; the first one is expected to be
    ``[1, N, 4 + C]`` or ``[1, 4 + C, N]`` with normalized box coordinates.
    """

    def predict(self, tensor: np.ndarray) -> List[np.ndarray]:
        ...

    def close(self) -> None:
        ...


class OnnxDetector:
    """
    YOLOv8 ONNX detector wrapper (Open Images V7, 601 classes).

    Accepts NHWC input and transposes to NCHW when the exported model expects
    channels first. Pixel-space box coordinates are rescaled into [0, 1].
    """

    def __init__(self, model_path: str, input_size: int = 640):
        if not os.path.exists(model_path):
            raise FileNotFoundError(f"YOLO model not found at {model_path}")

        import onnxruntime as ort

        self.model_path = model_path
        self.input_size = input_size
        logger.info("Initializing OnnxDetector with model: %s", model_path)
        # CPU-only for maximum portability
        self.session = ort.InferenceSession(
            model_path,
            providers=["CPUExecutionProvider"],
        )
        model_input = self.session.get_inputs()[0]
        self.input_name = model_input.name
        self.output_name = self.session.get_outputs()[0].name
        # Typical shapes: [1, 3, H, W] or [None, 3, H, W]
        shape = model_input.shape
        self.channels_first = len(shape) == 4 and shape[1] == 3

    def predict(self, tensor: np.ndarray) -> List[np.ndarray]:
        img = tensor.astype(np.float32, copy=False)
        if self.channels_first:
            img = np.ascontiguousarray(img.transpose(0, 3, 1, 2))  # (1, 3, S, S)

        logger.debug("Running YOLO ONNX inference: input_shape=%s", img.shape)
        output = self.session.run([self.output_name], {self.input_name: img})[0]

        # Ultralytics exports boxes in model-input pixels
        if output.ndim == 3:
            boxes_last = output.shape[2] > output.shape[1]
            boxes = output[:, :4, :] if boxes_last else output[..., :4]
            if boxes.size and float(np.max(boxes)) > 1.0:
                output = output.astype(np.float32, copy=True)
                if boxes_last:
                    output[:, :4, :] /= float(self.input_size)
                else:
                    output[..., :4] /= float(self.input_size)
        return [output]

    def close(self) -> None:
        self.session = None


class PlaceholderDetector:
    """
    Stand-in used when the real model cannot be loaded.

    Produces uniformly distributed output of the real detector's shape from a
    seeded generator, so repeated runs with the same seed are identical.
    """

    is_placeholder = True

    def __init__(self, num_classes: int, num_anchors: int = 8400, seed: int = 0):
        self.num_classes = num_classes
        self.num_anchors = num_anchors
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def predict(self, tensor: np.ndarray) -> List[np.ndarray]:
        logger.warning("Placeholder predict called - returning synthetic detections")
        output = self._rng.random(
            (1, self.num_anchors, 4 + self.num_classes), dtype=np.float32
        )
        return [output]

    def close(self) -> None:
        self._rng = np.random.default_rng(self.seed)
