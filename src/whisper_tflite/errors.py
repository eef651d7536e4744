"""Exception taxonomy for the transcriber.

Each error carries the process exit code the CLI reports for it.
"""

EXIT_INFERENCE: int = 1
EXIT_AUDIO_IO: int = 3
EXIT_CHANNELS: int = 4
EXIT_SAMPLE_RATE: int = 5
EXIT_BIT_DEPTH: int = 6
EXIT_FEATURES: int = 7
EXIT_BUNDLE: int = 8


class WhisperTfliteError(Exception):
    """Base class for every fatal condition raised by this package."""

    exit_code: int = 1


class BundleFormatError(WhisperTfliteError):
    """The resource bundle is corrupt, truncated, or not a bundle at all."""

    exit_code = EXIT_BUNDLE


class AudioIOError(WhisperTfliteError):
    """The audio file cannot be opened or is not a valid audio container."""

    exit_code = EXIT_AUDIO_IO


class AudioFormatError(WhisperTfliteError):
    """The audio violates one of the fixed target format preconditions."""


class UnsupportedChannelsError(AudioFormatError):
    exit_code = EXIT_CHANNELS


class UnsupportedSampleRateError(AudioFormatError):
    exit_code = EXIT_SAMPLE_RATE


class UnsupportedBitDepthError(AudioFormatError):
    exit_code = EXIT_BIT_DEPTH


class FeatureExtractionError(WhisperTfliteError):
    """The feature extractor failed or broke its output contract."""

    exit_code = EXIT_FEATURES


class InferenceError(WhisperTfliteError):
    """The inference engine could not be loaded or failed to run."""

    exit_code = EXIT_INFERENCE
