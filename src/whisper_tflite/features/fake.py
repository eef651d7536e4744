"""Fake feature extractor for CPU-only testing.

Produces a deterministic matrix of the contracted shape without any
spectral math.
"""

import numpy as np

from whisper_tflite.bundle import FilterBank
from whisper_tflite.errors import FeatureExtractionError


class FakeFeatureExtractor:
    """Deterministic extractor returning a constant-filled feature matrix."""

    def __init__(self, fill: float = 0.0, fail: bool = False, frame_count: int | None = None):
        """Initialize the fake extractor.

        Args:
            fill: Value written into every cell of the matrix.
            fail: Raise FeatureExtractionError on every call.
            frame_count: Force this many frames instead of the contracted count.
        """
        self._fill = fill
        self._fail = fail
        self._frame_count = frame_count
        self._call_count = 0
        self.last_samples: np.ndarray | None = None

    def compute(
        self,
        samples: np.ndarray,
        sample_rate: int,
        fft_size: int,
        hop_length: int,
        mel_bands: int,
        n_threads: int,
        filters: FilterBank,
    ) -> np.ndarray:
        self._call_count += 1
        self.last_samples = samples
        if self._fail:
            raise FeatureExtractionError("Fake extractor failure")

        frames = self._frame_count
        if frames is None:
            frames = len(samples) // hop_length
        return np.full((mel_bands, frames), self._fill, dtype=np.float32)

    @property
    def call_count(self) -> int:
        """Number of compute calls made."""
        return self._call_count
