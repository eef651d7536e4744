"""End-to-end transcription: audio -> features -> token ids -> text.

The Transcriber holds the parsed bundle and the two backends. It keeps no
per-request state, so one instance can serve concurrent requests as long
as its backends can.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np

from whisper_tflite.audio import NormalizedAudio, load_audio
from whisper_tflite.bundle import Bundle, FilterBank, Vocabulary
from whisper_tflite.constants import (
    DEFAULT_THREADS,
    HOP_LENGTH,
    MEL_LEN,
    N_FFT,
    N_MEL,
    SAMPLE_RATE,
)
from whisper_tflite.decoder import decode
from whisper_tflite.engine.protocol import InferenceEngine
from whisper_tflite.errors import FeatureExtractionError
from whisper_tflite.features.protocol import FeatureExtractor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transcription:
    """Result of one transcription run."""

    text: str
    token_ids: tuple[int, ...]
    audio_seconds: float = 0.0
    feature_seconds: float = 0.0
    inference_seconds: float = 0.0


def check_features(features: np.ndarray, mel_bands: int, frame_count: int) -> np.ndarray:
    """Verify the extractor returned a (mel_bands, frame_count) float matrix."""
    if not isinstance(features, np.ndarray) or features.shape != (mel_bands, frame_count):
        shape = getattr(features, "shape", None)
        raise FeatureExtractionError(
            f"Feature extractor returned shape {shape}, expected ({mel_bands}, {frame_count})"
        )
    return features.astype(np.float32, copy=False)


def to_engine_input(features: np.ndarray, input_shape: tuple[int, ...]) -> np.ndarray:
    """Fit a (mel_bands, frames) matrix to the engine's input tensor.

    Frames beyond the tensor window are dropped; missing frames are zeros.
    """
    mel_bands, mel_len = input_shape[-2], input_shape[-1]
    if features.shape[0] != mel_bands:
        raise FeatureExtractionError(
            f"Features have {features.shape[0]} mel bands, engine expects {mel_bands}"
        )

    frames = features.shape[1]
    if frames > mel_len:
        logger.warning(
            "Audio spans %d frames, only the first %d fit the model window", frames, mel_len
        )
        features = features[:, :mel_len]
    elif frames < mel_len:
        features = np.pad(features, ((0, 0), (0, mel_len - frames)))

    return np.ascontiguousarray(features, dtype=np.float32).reshape(input_shape)


def load_features_file(path: str | Path, mel_bands: int = N_MEL, mel_len: int = MEL_LEN) -> np.ndarray:
    """Read pre-computed features stored as raw little-endian float32."""
    try:
        data = np.fromfile(path, dtype="<f4")
    except OSError as e:
        raise FeatureExtractionError(f"Cannot read features file '{path}': {e}") from e

    expected = mel_bands * mel_len
    if data.size != expected:
        raise FeatureExtractionError(
            f"Features file '{path}' holds {data.size} values, expected {expected}"
        )
    return data.astype(np.float32).reshape(mel_bands, mel_len)


class Transcriber:
    """Runs audio through the feature extractor, engine and decoder."""

    def __init__(
        self,
        bundle: Bundle,
        extractor: FeatureExtractor | None,
        engine: InferenceEngine,
        n_threads: int = DEFAULT_THREADS,
    ):
        """Initialize the transcriber.

        Args:
            bundle: Parsed filter bank and vocabulary, shared read-only.
            extractor: Log-mel backend (real or fake), or None when only
                pre-computed features are transcribed.
            engine: Inference backend (real or fake).
            n_threads: Threads handed to the feature extractor.
        """
        self._bundle = bundle
        self._extractor = extractor
        self._engine = engine
        self._n_threads = n_threads

    @property
    def filters(self) -> FilterBank:
        return self._bundle.filters

    @property
    def vocab(self) -> Vocabulary:
        return self._bundle.vocab

    @property
    def engine(self) -> InferenceEngine:
        return self._engine

    def extract_features(self, audio: NormalizedAudio) -> np.ndarray:
        """Compute and validate the feature matrix for normalized audio."""
        if self._extractor is None:
            raise FeatureExtractionError("No feature extractor configured")
        features = self._extractor.compute(
            audio.samples,
            SAMPLE_RATE,
            N_FFT,
            HOP_LENGTH,
            N_MEL,
            self._n_threads,
            self._bundle.filters,
        )
        return check_features(features, N_MEL, len(audio.samples) // HOP_LENGTH)

    def transcribe_features(
        self,
        features: np.ndarray,
        audio_seconds: float = 0.0,
        feature_seconds: float = 0.0,
    ) -> Transcription:
        """Run the engine on a feature matrix and decode its output."""
        engine_input = to_engine_input(features, self._engine.input_shape)

        start = time.perf_counter()
        token_ids = self._engine.run(engine_input)
        inference_seconds = time.perf_counter() - start
        logger.info("Inference time %.3fs", inference_seconds)

        ids = tuple(int(t) for t in np.asarray(token_ids).reshape(-1))
        decoded = decode(ids, self._bundle.vocab)
        return Transcription(
            text=decoded.text,
            token_ids=ids,
            audio_seconds=audio_seconds,
            feature_seconds=feature_seconds,
            inference_seconds=inference_seconds,
        )

    def transcribe_audio(self, audio: NormalizedAudio) -> Transcription:
        start = time.perf_counter()
        features = self.extract_features(audio)
        feature_seconds = time.perf_counter() - start
        logger.info(
            "Computed %dx%d mel features in %.3fs",
            features.shape[0],
            features.shape[1],
            feature_seconds,
        )
        return self.transcribe_features(
            features,
            audio_seconds=audio.duration_s,
            feature_seconds=feature_seconds,
        )

    def transcribe_file(self, source: str | Path | BinaryIO) -> Transcription:
        """Load, validate and transcribe one audio file."""
        return self.transcribe_audio(load_audio(source))
