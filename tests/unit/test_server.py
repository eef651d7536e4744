"""Unit tests for the FastAPI server with fake backends."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from whisper_tflite.engine.fake import FakeEngine
from whisper_tflite.features.fake import FakeFeatureExtractor
from whisper_tflite.pipeline import Transcriber
from whisper_tflite.server import create_app


@pytest.fixture
def client(model_bundle):
    transcriber = Transcriber(model_bundle, FakeFeatureExtractor(), FakeEngine(token_ids=[5, 9, 12]))
    return TestClient(create_app(transcriber))


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert data["sample_rate"] == 16000
        assert data["mel_bands"] == 80
        assert data["vocab_size"] == 14
        assert data["multilingual"] is False


class TestTranscribeEndpoint:
    """Tests for POST /v1/transcribe."""

    def test_transcribe_wav(self, client, write_wav):
        path = write_wav(np.zeros(8000, dtype=np.int16))
        response = client.post("/v1/transcribe", content=path.read_bytes())
        assert response.status_code == 200

        data = response.json()
        assert data["text"] == "Hello world"
        assert data["tokens"] == [5, 9, 12]
        assert data["duration"] == pytest.approx(0.5)

    def test_invalid_container(self, client):
        response = client.post("/v1/transcribe", content=b"garbage")
        assert response.status_code == 400

    def test_empty_body(self, client):
        response = client.post("/v1/transcribe", content=b"")
        assert response.status_code == 400

    def test_unsupported_format(self, client, write_wav):
        path = write_wav(np.zeros(100, dtype=np.int16), sample_rate=8000)
        response = client.post("/v1/transcribe", content=path.read_bytes())
        assert response.status_code == 415
        assert "16 kHz" in response.json()["detail"]

    def test_extractor_failure(self, model_bundle, write_wav):
        transcriber = Transcriber(model_bundle, FakeFeatureExtractor(fail=True), FakeEngine())
        client = TestClient(create_app(transcriber))
        path = write_wav(np.zeros(100, dtype=np.int16))
        response = client.post("/v1/transcribe", content=path.read_bytes())
        assert response.status_code == 500
