"""Core constants for the Whisper TFLite transcriber.

The model consumes 30 second windows of 16kHz mono audio as an 80-band
log-mel spectrogram (3000 frames at a 10ms hop).
"""

# Audio format requirements
SAMPLE_RATE: int = 16000  # Hz - no resampling is performed
BITS_PER_SAMPLE: int = 16
SUPPORTED_CHANNELS: tuple[int, ...] = (1, 2)

# Spectrogram geometry
N_FFT: int = 400  # 25ms window
HOP_LENGTH: int = 160  # 10ms hop
N_MEL: int = 80
CHUNK_SIZE: int = 30  # seconds per inference window
N_SAMPLES: int = SAMPLE_RATE * CHUNK_SIZE  # 480000, minimum padded window
MEL_LEN: int = N_SAMPLES // HOP_LENGTH  # 3000 frames

# Resource bundle
BUNDLE_MAGIC: int = 0x74666C74  # "tflt"
MAX_TOKEN_BYTES: int = 255

# Special token ids for the English-only vocabulary.
# The multilingual vocabulary shifts each of these up by one.
TOKEN_EOT: int = 50256  # end of transcript
TOKEN_SOT: int = 50257  # start of transcript
TOKEN_TRANSLATE: int = 50358
TOKEN_TRANSCRIBE: int = 50359
TOKEN_PREV: int = 50360
TOKEN_SOLM: int = 50361
TOKEN_NOT: int = 50362  # no timestamps
TOKEN_BEG: int = 50363

# Threads handed to the feature extractor
DEFAULT_THREADS: int = 1
