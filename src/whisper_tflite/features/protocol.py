"""Feature extractor protocol.

Spectral feature extraction (windowing, FFT, mel projection) is delegated to
a backend behind this interface, keeping heavy numeric dependencies out of
the ingestion and decoding code.
"""

from typing import Protocol

import numpy as np

from whisper_tflite.bundle import FilterBank


class FeatureExtractor(Protocol):
    """Protocol for log-mel feature backends."""

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
        """Compute the feature matrix for a normalized mono clip.

        Args:
            samples: Float32 mono samples in [-1, 1], already padded.
            sample_rate: Sample rate of ``samples`` in Hz.
            fft_size: STFT window size.
            hop_length: Samples between successive frames.
            mel_bands: Number of mel bands to produce.
            n_threads: Worker threads the backend may use.
            filters: Mel filter bank from the resource bundle.

        Returns:
            Float32 array of shape (mel_bands, len(samples) // hop_length).

        Raises:
            FeatureExtractionError: If the backend fails.
        """
        ...
