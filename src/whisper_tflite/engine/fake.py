"""Fake engine for CPU-based testing.

Returns a fixed token sequence, allowing the full pipeline to run
without a model file or runtime.
"""

import time

import numpy as np

from whisper_tflite.constants import MEL_LEN, N_MEL
from whisper_tflite.errors import InferenceError

# Reference output of the English tiny model on a LibriSpeech clip.
GOLDEN_TOKEN_IDS: tuple[int, ...] = (
    50257, 50362, 1770, 13, 2264, 346, 353, 318,
    262, 46329, 286, 262, 3504, 6097, 11, 290, 356, 389, 9675, 284, 7062,
)


class FakeEngine:
    """Deterministic engine that always emits the same token ids."""

    def __init__(
        self,
        token_ids: tuple[int, ...] | list[int] = GOLDEN_TOKEN_IDS,
        input_shape: tuple[int, ...] = (1, N_MEL, MEL_LEN),
        latency_ms: float = 0.0,
    ):
        """Initialize the fake engine.

        Args:
            token_ids: Ids returned by every run.
            input_shape: Input tensor shape the engine reports and enforces.
            latency_ms: Simulated inference latency in milliseconds.
        """
        self._token_ids = tuple(token_ids)
        self._input_shape = tuple(input_shape)
        self._latency_ms = latency_ms
        self._call_count = 0
        self.last_input: np.ndarray | None = None

    @property
    def input_shape(self) -> tuple[int, ...]:
        return self._input_shape

    def run(self, features: np.ndarray) -> np.ndarray:
        expected = int(np.prod(self._input_shape))
        if features.size != expected:
            raise InferenceError(
                f"Input has {features.size} values, tensor expects {expected}"
            )

        if self._latency_ms > 0:
            time.sleep(self._latency_ms / 1000.0)

        self._call_count += 1
        self.last_input = features
        return np.array(self._token_ids, dtype=np.int32)

    def warmup(self) -> None:
        """No-op warmup for fake engine."""
        pass

    @property
    def call_count(self) -> int:
        """Number of run calls made."""
        return self._call_count
