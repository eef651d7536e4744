"""Shared fixtures: small bundles and on-disk WAV files."""

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from whisper_tflite.bundle import Bundle, FilterBank, SpecialTokens, Vocabulary
from whisper_tflite.constants import N_FFT, N_MEL, SAMPLE_RATE

# id -> token for a toy vocabulary; id 12 is end-of-text.
TOY_TOKENS: tuple[bytes, ...] = (
    b"!",
    b"a",
    b" b",
    b"   ",
    b"\t",
    b"Hello",
    b"\xc3",
    b"\xa9",
    b"  ",
    b" world",
    b"x",
    b"y",
    b"<|endoftext|>",
    b"<|startoftranscript|>",
)
TOY_EOT = 12


@pytest.fixture
def toy_vocab() -> Vocabulary:
    return Vocabulary(tokens=TOY_TOKENS, special=SpecialTokens(eot=TOY_EOT, sot=TOY_EOT + 1))


@pytest.fixture
def toy_filters() -> FilterBank:
    weights = np.arange(2 * 3, dtype=np.float32) / 10.0
    return FilterBank(mel_bands=2, fft_bins=3, weights=weights)


@pytest.fixture
def model_bundle(toy_vocab) -> Bundle:
    """Bundle with the model's real filter bank geometry."""
    filters = FilterBank(
        mel_bands=N_MEL,
        fft_bins=1 + N_FFT // 2,
        weights=np.zeros(N_MEL * (1 + N_FFT // 2), dtype=np.float32),
    )
    return Bundle(filters, toy_vocab)


@pytest.fixture
def write_wav(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper writing int16 samples to a WAV file under tmp_path."""

    def _write(
        pcm: np.ndarray,
        name: str = "clip.wav",
        sample_rate: int = SAMPLE_RATE,
        subtype: str = "PCM_16",
    ) -> Path:
        path = tmp_path / name
        sf.write(str(path), pcm, sample_rate, subtype=subtype, format="WAV")
        return path

    return _write
