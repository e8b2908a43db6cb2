import asyncio

import pytest
from conftest import APPLE_ID, BANANA_ID, FailAfterWarmupDetector, StaticDetector, broken_factory, make_loader, make_pipeline, make_raw

from food_vision.vision_pipeline import FoodRecognitionPipeline, fallback_result


def test_single_apple_end_to_end(apple_raw, image_file):
    pipeline = make_pipeline(StaticDetector(apple_raw))

    result = asyncio.run(pipeline.analyze_food(image_file))

    assert result.error is None
    assert result.source == "on_device"
    assert len(result.items) == 1
    item = result.items[0]
    assert (item.name, item.localized_name) == ("Apple", "Яблоко")
    assert item.grams == 96
    assert item.calories == 50
    assert (item.protein, item.fat, item.carbs) == (0.3, 0.2, 13.4)
    assert item.confidence == pytest.approx(0.9)

    total = result.total
    assert (total.calories, total.protein, total.fat, total.carbs) == (50, 0.3, 0.2, 13.4)


def test_result_wire_shape(apple_raw, image_file):
    pipeline = make_pipeline(StaticDetector(apple_raw))

    payload = pipeline.analyze_food_sync(image_file).to_dict()

    assert set(payload) == {"items", "total", "timestamp", "source", "processing_times"}
    assert set(payload["items"][0]) == {"name", "ru_name", "confidence", "grams", "calories", "protein", "fat", "carbs"}
    assert payload["processing_times"]["total_ms"] >= 0


def test_two_items_total(image_file):
    raw = make_raw(
        [
            ((0.5, 0.5, 0.4, 0.4), APPLE_ID, 0.9),
            ((0.5, 0.5, 1.0, 1.0), BANANA_ID, 0.8),
        ]
    )
    result = make_pipeline(StaticDetector(raw)).analyze_food_sync(image_file)

    banana = result.items[1]
    assert banana.grams == 600
    assert banana.calories == 534
    assert result.total.calories == 50 + 534
    assert result.total.carbs == pytest.approx(13.4 + 138.0)


def test_inference_failure_returns_fallback(apple_raw, image_file):
    pipeline = make_pipeline(FailAfterWarmupDetector(apple_raw))

    result = asyncio.run(pipeline.analyze_food(image_file))

    assert result.source == "fallback"
    assert result.error
    assert len(result.items) == 1
    assert result.items[0].grams == 250
    assert result.items[0].name == "Смешанное блюдо"
    assert result.total.calories == 375
    assert (result.total.protein, result.total.fat, result.total.carbs) == (25.0, 17.5, 37.5)


def test_missing_image_returns_fallback(apple_raw, tmp_path):
    pipeline = make_pipeline(StaticDetector(apple_raw))

    result = pipeline.analyze_food_sync(str(tmp_path / "gone.jpg"))

    assert result.source == "fallback"
    assert "not found" in result.error


def test_unexpected_error_returns_fallback(apple_raw, image_file, monkeypatch):
    import food_vision.vision_pipeline.pipeline as pipeline_module

    def explode(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr(pipeline_module, "decode_predictions", explode)
    result = make_pipeline(StaticDetector(apple_raw)).analyze_food_sync(image_file)

    assert result.source == "fallback"
    assert "boom" in result.error


def test_placeholder_pipeline_still_answers(image_file):
    pipeline = FoodRecognitionPipeline(loader=make_loader(broken_factory))

    result = pipeline.analyze_food_sync(image_file)

    assert result.error is None
    assert len(result.items) <= 3
    for item in result.items:
        assert 50 <= item.grams <= 600
        assert item.confidence >= 0.4


def test_concurrent_analyses_share_one_load(apple_raw, image_file):
    pipeline = make_pipeline(StaticDetector(apple_raw))

    async def scenario():
        return await asyncio.gather(*(pipeline.analyze_food(image_file) for _ in range(4)))

    results = asyncio.run(scenario())

    assert all(r.total.calories == 50 for r in results)
    assert pipeline.loader.load_count == 1


def test_model_lifecycle(apple_raw, image_file):
    detector = StaticDetector(apple_raw)
    pipeline = make_pipeline(detector)

    async def scenario():
        assert not pipeline.is_model_loaded()
        await pipeline.analyze_food(image_file)
        assert pipeline.is_model_loaded()
        await pipeline.unload_model()
        assert not pipeline.is_model_loaded()

    asyncio.run(scenario())
    assert detector.closed


def test_fallback_result_keeps_message():
    result = fallback_result("camera roll unavailable")

    assert result.error == "camera roll unavailable"
    assert result.to_dict()["error"] == "camera roll unavailable"
    assert result.items[0].localized_name == "Смешанное блюдо"


def test_missing_class_file_keeps_detector_working(apple_raw, image_file, tmp_path):
    loader = make_loader(lambda: StaticDetector(apple_raw), class_names_path=str(tmp_path / "missing.json"))
    pipeline = FoodRecognitionPipeline(loader=loader)

    result = pipeline.analyze_food_sync(image_file)

    assert result.source == "on_device"
    assert result.error is None
    assert [item.name for item in result.items] == ["Apple"]
    assert not asyncio.run(loader.ensure_loaded()).is_placeholder
