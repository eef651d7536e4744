"""TensorFlow Lite engine running an exported Whisper model.

The model must take a float32 log-mel tensor and emit int32 token ids,
as produced by the Whisper TFLite export with generation baked in.
"""

import logging
import time
from pathlib import Path

import numpy as np

from whisper_tflite.errors import InferenceError

logger = logging.getLogger(__name__)


class TFLiteEngine:
    """Whisper engine backed by the LiteRT interpreter.

    The interpreter is created lazily on first use and reused for every
    subsequent run. It is not safe to share across threads.
    """

    def __init__(self, model_path: str | Path, num_threads: int | None = None):
        """Initialize the engine.

        Args:
            model_path: Path to the .tflite model file.
            num_threads: Interpreter thread count, or None for the runtime default.
        """
        self._model_path = Path(model_path)
        self._num_threads = num_threads
        self._interpreter = None

    def _load_model(self) -> None:
        """Build the interpreter and allocate tensors (lazy initialization)."""
        if self._interpreter is not None:
            return

        from ai_edge_litert.interpreter import Interpreter

        try:
            interpreter = Interpreter(
                model_path=str(self._model_path),
                num_threads=self._num_threads,
            )
            interpreter.allocate_tensors()
        except (ValueError, RuntimeError) as e:
            raise InferenceError(f"Failed to load model '{self._model_path}': {e}") from e

        self._interpreter = interpreter
        logger.info("Loaded TFLite model %s", self._model_path)

    @property
    def input_shape(self) -> tuple[int, ...]:
        self._load_model()
        detail = self._interpreter.get_input_details()[0]
        return tuple(int(d) for d in detail["shape"])

    def run(self, features: np.ndarray) -> np.ndarray:
        self._load_model()
        input_detail = self._interpreter.get_input_details()[0]
        output_detail = self._interpreter.get_output_details()[0]

        shape = tuple(int(d) for d in input_detail["shape"])
        if features.size != int(np.prod(shape)):
            raise InferenceError(
                f"Input has {features.size} values, tensor {shape} expects {int(np.prod(shape))}"
            )

        try:
            self._interpreter.set_tensor(
                input_detail["index"], features.astype(np.float32).reshape(shape)
            )
            self._interpreter.invoke()
            output = self._interpreter.get_tensor(output_detail["index"])
        except (ValueError, RuntimeError) as e:
            raise InferenceError(f"Inference failed: {e}") from e

        return output.reshape(-1)

    def warmup(self) -> None:
        """Load the model and run one inference on silence."""
        start = time.perf_counter()
        self.run(np.zeros(self.input_shape, dtype=np.float32))
        logger.info("TFLiteEngine warmed up in %.2fs", time.perf_counter() - start)

    @property
    def model_path(self) -> Path:
        return self._model_path

    @property
    def is_loaded(self) -> bool:
        """Check if the interpreter is built."""
        return self._interpreter is not None
