"""Log-mel feature extractor backed by torch.stft.

The STFT itself is torch's; this module only projects the power spectrum
through the bundle's filter bank and applies Whisper's log scaling.
"""

import logging

import numpy as np
import torch

from whisper_tflite.bundle import FilterBank
from whisper_tflite.errors import FeatureExtractionError

logger = logging.getLogger(__name__)


class TorchMelExtractor:
    """Whisper-style log-mel spectrogram on CPU or GPU."""

    def __init__(self, device: str = "cpu"):
        self._device = device

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
        n_bins = 1 + fft_size // 2
        if filters.mel_bands != mel_bands or filters.fft_bins != n_bins:
            raise FeatureExtractionError(
                f"Filter bank is {filters.mel_bands}x{filters.fft_bins}, "
                f"expected {mel_bands}x{n_bins}"
            )
        if len(samples) < fft_size:
            raise FeatureExtractionError(
                f"Need at least {fft_size} samples, got {len(samples)}"
            )

        torch.set_num_threads(max(1, n_threads))
        try:
            with torch.no_grad():
                audio = torch.from_numpy(np.ascontiguousarray(samples, dtype=np.float32))
                audio = audio.to(self._device)
                window = torch.hann_window(fft_size, device=self._device)
                stft = torch.stft(
                    audio, fft_size, hop_length, window=window, return_complex=True
                )
                power = stft[..., :-1].abs() ** 2

                bank = torch.from_numpy(np.array(filters.matrix)).to(self._device)
                mel = bank @ power

                log_spec = torch.clamp(mel, min=1e-10).log10()
                log_spec = torch.maximum(log_spec, log_spec.max() - 8.0)
                log_spec = (log_spec + 4.0) / 4.0
        except RuntimeError as e:
            raise FeatureExtractionError(f"Failed to compute mel spectrogram: {e}") from e

        logger.debug("Computed %s log-mel features on %s", tuple(log_spec.shape), self._device)
        return log_spec.cpu().numpy().astype(np.float32)

    @property
    def device(self) -> str:
        return self._device
