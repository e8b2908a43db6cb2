import numpy as np
import pytest
from conftest import APPLE_ID, NUM_CLASSES, StaticDetector, make_raw

from food_vision.errors import InferenceError
from food_vision.types import ModelHandle
from food_vision.vision_pipeline.inference import run_inference


def _handle(detector):
    return ModelHandle(detector=detector, is_placeholder=False, warmed_up=True, input_size=8)


def _tensor():
    return np.zeros((1, 8, 8, 3), dtype=np.float32)


def test_returns_detached_copy_and_clears_outputs(apple_raw):
    detector = StaticDetector(apple_raw)

    raw = run_inference(_tensor(), _handle(detector), NUM_CLASSES)

    assert raw.shape == apple_raw.shape
    assert raw.dtype == np.float32
    assert np.array_equal(raw, apple_raw)
    assert detector.last_outputs == []


def test_channels_first_output_is_transposed(apple_raw):
    detector = StaticDetector(np.ascontiguousarray(apple_raw.transpose(0, 2, 1)))

    raw = run_inference(_tensor(), _handle(detector), NUM_CLASSES)

    assert raw.shape == apple_raw.shape
    assert raw[0, 0, 4 + APPLE_ID] == pytest.approx(0.9)


def test_result_does_not_share_memory_with_detector_output(apple_raw):
    class LeakyDetector(StaticDetector):
        def predict(self, tensor):
            self.last_outputs = [self.output]
            return self.last_outputs

    detector = LeakyDetector(apple_raw)
    raw = run_inference(_tensor(), _handle(detector), NUM_CLASSES)

    assert not np.shares_memory(raw, apple_raw)


def test_runtime_failure_becomes_inference_error():
    class CrashingDetector(StaticDetector):
        def predict(self, tensor):
            raise RuntimeError("delegate crashed")

    with pytest.raises(InferenceError, match="delegate crashed"):
        run_inference(_tensor(), _handle(CrashingDetector(None)), NUM_CLASSES)


def test_empty_outputs_raise():
    class SilentDetector(StaticDetector):
        def predict(self, tensor):
            return []

    with pytest.raises(InferenceError):
        run_inference(_tensor(), _handle(SilentDetector(None)), NUM_CLASSES)


def test_class_count_mismatch_raises():
    detector = StaticDetector(make_raw([], num_classes=10))

    with pytest.raises(InferenceError, match="does not match"):
        run_inference(_tensor(), _handle(detector), NUM_CLASSES)


def test_outputs_are_released_when_decoding_fails():
    detector = StaticDetector(make_raw([], num_classes=10))

    with pytest.raises(InferenceError):
        run_inference(_tensor(), _handle(detector), NUM_CLASSES)

    assert detector.calls == 1
    assert detector.last_outputs == []
