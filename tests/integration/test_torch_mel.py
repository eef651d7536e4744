"""Integration tests for the torch log-mel backend.

Skipped when torch is not installed (pip install -e '.[torch]').
"""

import numpy as np
import pytest

torch = pytest.importorskip("torch")

from whisper_tflite.bundle import FilterBank  # noqa: E402
from whisper_tflite.constants import HOP_LENGTH, MEL_LEN, N_FFT, N_MEL, N_SAMPLES, SAMPLE_RATE  # noqa: E402
from whisper_tflite.errors import FeatureExtractionError  # noqa: E402
from whisper_tflite.features.torch_mel import TorchMelExtractor  # noqa: E402
from whisper_tflite.pipeline import check_features  # noqa: E402


@pytest.fixture
def filters():
    rng = np.random.default_rng(0)
    n_bins = 1 + N_FFT // 2
    return FilterBank(N_MEL, n_bins, rng.random(N_MEL * n_bins, dtype=np.float32) * 0.01)


class TestTorchMelExtractor:
    def test_output_contract(self, filters):
        t = np.arange(N_SAMPLES, dtype=np.float32) / SAMPLE_RATE
        samples = (0.3 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)

        features = TorchMelExtractor().compute(
            samples, SAMPLE_RATE, N_FFT, HOP_LENGTH, N_MEL, 1, filters
        )

        check_features(features, N_MEL, MEL_LEN)
        assert features.dtype == np.float32
        # Log values are floored 8 decades below the peak, then scaled by 1/4
        assert features.max() - features.min() <= 2.0 + 1e-5

    def test_silence(self, filters):
        features = TorchMelExtractor().compute(
            np.zeros(N_SAMPLES, dtype=np.float32), SAMPLE_RATE, N_FFT, HOP_LENGTH, N_MEL, 2, filters
        )
        np.testing.assert_allclose(features, (-10.0 + 4.0) / 4.0)

    def test_filter_shape_mismatch(self):
        filters = FilterBank(2, 3, np.zeros(6, dtype=np.float32))
        with pytest.raises(FeatureExtractionError, match="Filter bank"):
            TorchMelExtractor().compute(
                np.zeros(N_SAMPLES, dtype=np.float32), SAMPLE_RATE, N_FFT, HOP_LENGTH, N_MEL, 1, filters
            )

    def test_too_short(self, filters):
        with pytest.raises(FeatureExtractionError, match="at least"):
            TorchMelExtractor().compute(
                np.zeros(10, dtype=np.float32), SAMPLE_RATE, N_FFT, HOP_LENGTH, N_MEL, 1, filters
            )
