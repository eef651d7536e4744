"""Whisper TFLite transcription package."""

from whisper_tflite.constants import (
    HOP_LENGTH,
    MEL_LEN,
    N_FFT,
    N_MEL,
    N_SAMPLES,
    SAMPLE_RATE,
)

__all__ = [
    "SAMPLE_RATE",
    "N_FFT",
    "HOP_LENGTH",
    "N_MEL",
    "N_SAMPLES",
    "MEL_LEN",
]
