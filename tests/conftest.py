import time

import numpy as np
import pytest
from PIL import Image

from food_vision.vision_pipeline import FoodRecognitionPipeline
from food_vision.vision_pipeline.loader import ModelLoader

NUM_CLASSES = 601
TEST_INPUT_SIZE = 64

APPLE_ID = 10
BAGEL_ID = 16
BANANA_ID = 21
ACCORDION_ID = 0


def make_raw(rows, num_anchors=8, num_classes=NUM_CLASSES):
    """
    Build a (1, N, 4 + C) prediction tensor.

    ``rows`` holds ``((cx, cy, w, h), class_id, score)`` per anchor; the
    remaining anchors score zero for every class.
    """
    raw = np.zeros((1, max(num_anchors, len(rows)), 4 + num_classes), dtype=np.float32)
    for i, (box, class_id, score) in enumerate(rows):
        raw[0, i, :4] = box
        raw[0, i, 4 + class_id] = score
    return raw


class StaticDetector:
    """Returns the same predictions on every call, in a fresh list."""

    def __init__(self, output):
        self.output = output
        self.calls = 0
        self.closed = False
        self.last_outputs = None

    def predict(self, tensor):
        self.calls += 1
        self.last_outputs = [self.output.copy()]
        return self.last_outputs

    def close(self):
        self.closed = True


class FailAfterWarmupDetector(StaticDetector):
    """Survives the loader's warm-up, then fails every real inference."""

    def predict(self, tensor):
        self.calls += 1
        if self.calls > 1:
            raise RuntimeError("delegate crashed")
        return [self.output.copy()]


class SlowCountingFactory:
    def __init__(self, detector, delay=0.05):
        self.detector = detector
        self.delay = delay
        self.calls = 0

    def __call__(self):
        self.calls += 1
        time.sleep(self.delay)
        return self.detector


def broken_factory():
    raise FileNotFoundError("YOLO model not found at /nowhere/model.onnx")


def make_loader(detector_factory, **kwargs):
    kwargs.setdefault("input_size", TEST_INPUT_SIZE)
    kwargs.setdefault("placeholder_anchors", 64)
    return ModelLoader(detector_factory=detector_factory, **kwargs)


def make_pipeline(detector, **kwargs):
    return FoodRecognitionPipeline(loader=make_loader(lambda: detector), **kwargs)


@pytest.fixture
def apple_raw():
    # center (0.5, 0.5), size 0.4 x 0.4 → corner box (0.3, 0.3, 0.4, 0.4)
    return make_raw([((0.5, 0.5, 0.4, 0.4), APPLE_ID, 0.9)])


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "meal.jpg"
    Image.new("RGB", (120, 80), color=(255, 0, 0)).save(path, format="JPEG")
    return str(path)


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "meal.png"
    Image.new("RGBA", (50, 50), color=(0, 0, 255, 255)).save(path, format="PNG")
    return str(path)
