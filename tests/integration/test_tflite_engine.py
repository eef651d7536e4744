"""Integration tests for the TFLite engine.

These need ai-edge-litert (pip install -e '.[tflite]') and, for inference,
a Whisper TFLite model:

    WHISPER_TFLITE_MODEL=whisper-tiny.en.tflite pytest tests/integration
"""

import os

import numpy as np
import pytest

pytest.importorskip("ai_edge_litert")

from whisper_tflite.engine.tflite import TFLiteEngine  # noqa: E402
from whisper_tflite.errors import InferenceError  # noqa: E402

MODEL_PATH = os.environ.get("WHISPER_TFLITE_MODEL")
requires_model = pytest.mark.skipif(not MODEL_PATH, reason="WHISPER_TFLITE_MODEL not set")


class TestTFLiteEngine:
    def test_missing_model(self, tmp_path):
        engine = TFLiteEngine(tmp_path / "missing.tflite")
        with pytest.raises(InferenceError):
            engine.warmup()
        assert not engine.is_loaded

    @requires_model
    def test_engine_loads(self):
        engine = TFLiteEngine(MODEL_PATH)
        engine.warmup()
        assert engine.is_loaded
        assert engine.input_shape[-2:] == (80, 3000)

    @requires_model
    def test_engine_runs_on_silence(self):
        engine = TFLiteEngine(MODEL_PATH)
        ids = engine.run(np.zeros(engine.input_shape, dtype=np.float32))
        assert ids.ndim == 1
        assert np.issubdtype(ids.dtype, np.integer)

    @requires_model
    def test_rejects_wrong_input_size(self):
        engine = TFLiteEngine(MODEL_PATH)
        with pytest.raises(InferenceError):
            engine.run(np.zeros(10, dtype=np.float32))
