import io

import pytest
from conftest import StaticDetector, make_pipeline
from fastapi.testclient import TestClient
from PIL import Image

import food_vision.main as main
from food_vision.errors import InvalidImageError, RateLimitError, RemoteAnalysisError
from food_vision.remote_vision import parse_worker_response


def _jpeg_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (40, 30), color=(200, 120, 40)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def client(monkeypatch, apple_raw):
    monkeypatch.setattr(main, "pipeline", make_pipeline(StaticDetector(apple_raw)))
    return TestClient(main.app)


class FakeRemoteClient:
    def __init__(self, outcome):
        self.outcome = outcome

    def analyze_food_image(self, image_path):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _use_remote(monkeypatch, outcome):
    monkeypatch.setattr(main, "get_remote_client", lambda: FakeRemoteClient(outcome))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "model_loaded": False}


def test_analyze_returns_items(client):
    response = client.post("/analyze", files={"image": ("meal.jpg", _jpeg_bytes(), "image/jpeg")})

    assert response.status_code == 200
    body = response.json()
    assert body["items"][0]["ru_name"] == "Яблоко"
    assert body["items"][0]["grams"] == 96
    assert body["total"]["calories"] == 50
    assert "error" not in body


def test_analyze_bad_image_still_answers_with_fallback(client):
    response = client.post("/analyze", files={"image": ("meal.jpg", b"not a jpeg", "image/jpeg")})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "fallback"
    assert body["items"][0]["grams"] == 250
    assert body["error"]


def test_analyze_rejects_unsupported_type(client):
    response = client.post("/analyze", files={"image": ("meal.gif", b"GIF89a", "image/gif")})

    assert response.status_code == 422


def test_analyze_requires_image(client):
    response = client.post("/analyze")

    assert response.status_code == 422


def test_remote_success(client, monkeypatch):
    outcome = parse_worker_response({"items": [{"name": "Soup", "grams": 250}], "total": {"calories": 120}})
    _use_remote(monkeypatch, outcome)

    response = client.post("/analyze/remote", files={"image": ("meal.jpg", _jpeg_bytes(), "image/jpeg")})

    assert response.status_code == 200
    assert response.json()["items"][0]["name"] == "Soup"
    assert response.json()["source"] == "remote"


@pytest.mark.parametrize(
    "error,status",
    [
        (RateLimitError("Слишком много запросов. Попробуйте через минуту.", status_code=429), 429),
        (InvalidImageError("Некорректное изображение. Попробуйте другое фото.", status_code=400), 400),
        (RemoteAnalysisError("Ошибка анализа: HTTP 500", status_code=500), 502),
    ],
)
def test_remote_errors_map_to_status(client, monkeypatch, error, status):
    _use_remote(monkeypatch, error)

    response = client.post("/analyze/remote", files={"image": ("meal.png", _jpeg_bytes(), "image/png")})

    assert response.status_code == status
    assert response.json()["detail"] == str(error)
