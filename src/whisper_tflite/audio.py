"""Audio ingestion: format validation, downmixing and padding.

Input must be 16kHz, 16-bit signed PCM, mono or stereo. Output is a single
float32 channel normalized to [-1, 1] and zero-padded to the model window.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np
import soundfile as sf

from whisper_tflite.constants import (
    BITS_PER_SAMPLE,
    N_SAMPLES,
    SAMPLE_RATE,
    SUPPORTED_CHANNELS,
)
from whisper_tflite.errors import (
    AudioIOError,
    UnsupportedBitDepthError,
    UnsupportedChannelsError,
    UnsupportedSampleRateError,
)

logger = logging.getLogger(__name__)

PCM16_SUBTYPE = "PCM_16"


@dataclass(frozen=True, eq=False)
class NormalizedAudio:
    """Mono float32 samples ready for feature extraction."""

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE
    source_channels: int = 1
    source_frames: int = 0

    @property
    def duration_s(self) -> float:
        """Duration of the source clip, before padding."""
        return self.source_frames / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)


def int16_to_float32(pcm: np.ndarray) -> np.ndarray:
    """Convert mono int16 samples to float32 normalized to [-1, 1].

    Args:
        pcm: 1-D int16 array.

    Returns:
        Float32 array where each sample is ``s / 32768``.
    """
    audio = pcm.astype(np.float32)
    audio /= 32768.0
    return audio


def downmix_stereo(pcm: np.ndarray) -> np.ndarray:
    """Collapse interleaved int16 stereo frames to one float32 channel.

    Each output sample is ``(left + right) / 65536``. The sum is taken in
    int32 so it cannot wrap.

    Args:
        pcm: int16 array of shape (frames, 2).

    Returns:
        Float32 array of shape (frames,).
    """
    total = pcm[:, 0].astype(np.int32) + pcm[:, 1].astype(np.int32)
    return (total / 65536.0).astype(np.float32)


def pad_to_length(audio: np.ndarray, min_samples: int = N_SAMPLES) -> np.ndarray:
    """Append trailing zeros up to ``min_samples``. Longer input is returned as is."""
    if len(audio) >= min_samples:
        return audio
    return np.pad(audio, (0, min_samples - len(audio)))


def validate_format(channels: int, sample_rate: int, subtype: str, name: str = "audio") -> None:
    """Check the target format preconditions in the order they are reported.

    Raises:
        UnsupportedChannelsError: Channel count is not 1 or 2.
        UnsupportedSampleRateError: Sample rate is not 16kHz.
        UnsupportedBitDepthError: Samples are not 16-bit signed PCM.
    """
    if channels not in SUPPORTED_CHANNELS:
        raise UnsupportedChannelsError(
            f"Audio file '{name}' must be mono or stereo (got {channels} channels)"
        )
    if sample_rate != SAMPLE_RATE:
        raise UnsupportedSampleRateError(
            f"Audio file '{name}' must be {SAMPLE_RATE // 1000} kHz (got {sample_rate} Hz)"
        )
    if subtype != PCM16_SUBTYPE:
        raise UnsupportedBitDepthError(
            f"Audio file '{name}' must be {BITS_PER_SAMPLE}-bit signed PCM (got {subtype})"
        )


def load_audio(
    source: str | Path | BinaryIO,
    min_samples: int = N_SAMPLES,
) -> NormalizedAudio:
    """Load an audio file and normalize it for the feature extractor.

    Args:
        source: Path to the audio file, or a binary file object.
        min_samples: Length the output is zero-padded to.

    Returns:
        Mono float32 audio, at least ``min_samples`` long.

    Raises:
        AudioIOError: The file cannot be opened or decoded.
        AudioFormatError: Channel count, sample rate or bit depth is unsupported.
    """
    if isinstance(source, (str, Path)):
        source = name = str(source)
    else:
        name = getattr(source, "name", "<stream>")

    try:
        with sf.SoundFile(source) as f:
            validate_format(f.channels, f.samplerate, f.subtype, name)
            pcm = f.read(dtype="int16", always_2d=True)
            channels = f.channels
    except (sf.LibsndfileError, OSError, TypeError) as e:
        # soundfile raises TypeError for headerless RAW input, which has no
        # sample rate to validate

        raise AudioIOError(f"Failed to open audio file '{name}': {e}") from e

    frames = pcm.shape[0]
    if channels == 1:
        mono = int16_to_float32(pcm[:, 0])
    else:
        mono = downmix_stereo(pcm)

    samples = pad_to_length(mono, min_samples)
    logger.debug(
        "Loaded %s: %d frames, %d channel(s), padded to %d samples",
        name,
        frames,
        channels,
        len(samples),
    )
    return NormalizedAudio(
        samples=samples,
        sample_rate=SAMPLE_RATE,
        source_channels=channels,
        source_frames=frames,
    )
