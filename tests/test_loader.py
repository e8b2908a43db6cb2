import asyncio

import numpy as np
import pytest
from conftest import TEST_INPUT_SIZE, SlowCountingFactory, StaticDetector, broken_factory, make_loader, make_raw

from food_vision.vision_pipeline.detector import OnnxDetector, PlaceholderDetector


def test_concurrent_ensure_loaded_runs_one_load():
    factory = SlowCountingFactory(StaticDetector(make_raw([])))
    loader = make_loader(factory)

    async def scenario():
        return await asyncio.gather(loader.ensure_loaded(), loader.ensure_loaded(), loader.ensure_loaded())

    first, second, third = asyncio.run(scenario())

    assert first is second is third
    assert factory.calls == 1
    assert loader.load_count == 1


def test_sequential_calls_reuse_handle():
    detector = StaticDetector(make_raw([]))
    loader = make_loader(lambda: detector)

    async def scenario():
        return await loader.ensure_loaded(), await loader.ensure_loaded()

    first, second = asyncio.run(scenario())

    assert first is second
    assert loader.load_count == 1


def test_warm_up_runs_on_zero_tensor():
    seen = []

    class RecordingDetector(StaticDetector):
        def predict(self, tensor):
            seen.append(tensor.copy())
            return super().predict(tensor)

    loader = make_loader(lambda: RecordingDetector(make_raw([])))
    handle = asyncio.run(loader.ensure_loaded())

    assert handle.warmed_up
    assert not handle.is_placeholder
    assert seen[0].shape == (1, TEST_INPUT_SIZE, TEST_INPUT_SIZE, 3)
    assert not seen[0].any()


def test_failed_detector_degrades_to_placeholder():
    loader = make_loader(broken_factory)

    handle = asyncio.run(loader.ensure_loaded())

    assert handle.is_placeholder
    assert isinstance(handle.detector, PlaceholderDetector)
    assert handle.detector.num_classes == len(loader.class_table)
    assert loader.is_loaded()


def test_missing_onnx_file_degrades_to_placeholder(tmp_path):
    loader = make_loader(None, model_path=str(tmp_path / "absent.onnx"))

    handle = asyncio.run(loader.ensure_loaded())

    assert handle.is_placeholder


def test_unload_releases_handle_and_next_call_reloads():
    detector = StaticDetector(make_raw([]))
    loader = make_loader(lambda: detector)

    async def scenario():
        first = await loader.ensure_loaded()
        await loader.unload()
        assert not loader.is_loaded()
        second = await loader.ensure_loaded()
        return first, second

    first, second = asyncio.run(scenario())

    assert detector.closed
    assert first is not second
    assert loader.load_count == 2


def test_placeholder_is_deterministic_per_seed():
    a = PlaceholderDetector(num_classes=5, num_anchors=16, seed=3)
    b = PlaceholderDetector(num_classes=5, num_anchors=16, seed=3)
    dummy = np.zeros((1, 8, 8, 3), dtype=np.float32)

    out_a = a.predict(dummy)[0]
    out_b = b.predict(dummy)[0]

    assert out_a.shape == (1, 16, 9)
    assert np.array_equal(out_a, out_b)
    assert out_a.min() >= 0.0 and out_a.max() < 1.0


def test_onnx_detector_requires_model_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="nope.onnx"):
        OnnxDetector(str(tmp_path / "nope.onnx"))


def test_unload_during_load_leaves_model_unloaded():
    detector = StaticDetector(make_raw([]))
    loader = make_loader(SlowCountingFactory(detector, delay=0.2))

    async def scenario():
        pending = asyncio.ensure_future(loader.ensure_loaded())
        await asyncio.sleep(0.05)
        await loader.unload()
        await pending
        return loader.is_loaded()

    assert asyncio.run(scenario()) is False
    assert detector.closed
    assert loader.load_count == 1
