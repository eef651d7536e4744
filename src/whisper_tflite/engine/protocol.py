"""Engine protocol defining the interface for inference backends.

This is the boundary that isolates the model runtime from ingestion,
decoding, the CLI and the server.
"""

from typing import Protocol

import numpy as np


class InferenceEngine(Protocol):
    """Protocol for speech-to-text inference engines.

    An engine has one fixed float input tensor (the log-mel features) and
    one fixed integer output tensor (the generated token ids).
    """

    @property
    def input_shape(self) -> tuple[int, ...]:
        """Shape of the input tensor, e.g. (1, 80, 3000)."""
        ...

    def run(self, features: np.ndarray) -> np.ndarray:
        """Run inference on one feature buffer.

        Args:
            features: Float32 array with exactly ``prod(input_shape)`` values.

        Returns:
            1-D integer array of token ids.

        Raises:
            InferenceError: If the engine cannot run.
        """
        ...

    def warmup(self) -> None:
        """Load the model and run a dummy inference."""
        ...
