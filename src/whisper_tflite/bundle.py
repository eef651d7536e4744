"""Binary resource bundle holding the mel filter bank and token vocabulary.

Layout (little-endian, sequential):

    magic:u32 | n_mel:u32 | n_fft:u32 | weights:f32[n_mel * n_fft]
    | n_vocab:i32 | { len:u32 | bytes[len] } * n_vocab

The bundle is parsed once at startup into immutable values that can be
shared by any number of concurrent transcriptions.
"""

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

import numpy as np

from whisper_tflite.constants import (
    BUNDLE_MAGIC,
    MAX_TOKEN_BYTES,
    TOKEN_BEG,
    TOKEN_EOT,
    TOKEN_NOT,
    TOKEN_PREV,
    TOKEN_SOLM,
    TOKEN_SOT,
    TOKEN_TRANSCRIBE,
    TOKEN_TRANSLATE,
)
from whisper_tflite.errors import BundleFormatError

logger = logging.getLogger(__name__)

_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")


class ByteReader:
    """Forward-only cursor over a byte buffer with bounds-checked reads."""

    def __init__(self, data: bytes):
        self._data = memoryview(data)
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read(self, size: int, what: str) -> bytes:
        """Read exactly ``size`` bytes or raise BundleFormatError."""
        if size < 0 or size > self.remaining:
            raise BundleFormatError(
                f"Truncated bundle: {what} needs {size} bytes at offset "
                f"{self._offset}, only {self.remaining} left"
            )
        start = self._offset
        self._offset += size
        return self._data[start : self._offset].tobytes()

    def read_u32(self, what: str) -> int:
        return _U32.unpack(self.read(_U32.size, what))[0]

    def read_i32(self, what: str) -> int:
        return _I32.unpack(self.read(_I32.size, what))[0]

    def read_f32_array(self, count: int, what: str) -> np.ndarray:
        raw = self.read(count * 4, what)
        return np.frombuffer(raw, dtype="<f4").astype(np.float32)


@dataclass(frozen=True, eq=False)
class FilterBank:
    """Mel filter bank, ``weights`` stored row-major as (mel_bands, fft_bins)."""

    mel_bands: int
    fft_bins: int
    weights: np.ndarray

    def __post_init__(self) -> None:
        weights = np.array(self.weights, dtype=np.float32).reshape(-1)
        if weights.size != self.mel_bands * self.fft_bins:
            raise BundleFormatError(
                f"Filter bank has {weights.size} weights, expected "
                f"{self.mel_bands} x {self.fft_bins} = {self.mel_bands * self.fft_bins}"
            )
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)

    @property
    def matrix(self) -> np.ndarray:
        """Read-only (mel_bands, fft_bins) view of the weights."""
        return self.weights.reshape(self.mel_bands, self.fft_bins)


@dataclass(frozen=True)
class SpecialTokens:
    """Control token ids. Every id >= ``eot`` is never rendered as text."""

    eot: int = TOKEN_EOT
    sot: int = TOKEN_SOT
    translate: int = TOKEN_TRANSLATE
    transcribe: int = TOKEN_TRANSCRIBE
    prev: int = TOKEN_PREV
    solm: int = TOKEN_SOLM
    no_timestamps: int = TOKEN_NOT
    beg: int = TOKEN_BEG

    @classmethod
    def english(cls) -> "SpecialTokens":
        return cls()

    @classmethod
    def multilingual(cls) -> "SpecialTokens":
        """Multilingual models insert one extra token before the specials."""
        base = cls()
        return cls(
            eot=base.eot + 1,
            sot=base.sot + 1,
            translate=base.translate + 1,
            transcribe=base.transcribe + 1,
            prev=base.prev + 1,
            solm=base.solm + 1,
            no_timestamps=base.no_timestamps + 1,
            beg=base.beg + 1,
        )


@dataclass(frozen=True)
class Vocabulary:
    """Token table indexed by id, tokens kept as raw bytes.

    Byte-level BPE tokens may hold only part of a multi-byte UTF-8
    character, so text is decoded after tokens are joined.
    """

    tokens: tuple[bytes, ...]
    special: SpecialTokens = field(default_factory=SpecialTokens.english)

    @property
    def size(self) -> int:
        return len(self.tokens)

    @property
    def end_of_text_id(self) -> int:
        return self.special.eot

    @property
    def is_multilingual(self) -> bool:
        return self.special == SpecialTokens.multilingual()

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, token_id: int) -> bytes:
        return self.tokens[token_id]

    def token_to_str(self, token_id: int) -> str:
        return self.tokens[token_id].decode("utf-8", errors="replace")


class Bundle(NamedTuple):
    filters: FilterBank
    vocab: Vocabulary


def parse_bundle(data: bytes, multilingual: bool = False) -> Bundle:
    """Decode a resource bundle.

    Args:
        data: Raw bundle bytes.
        multilingual: Whether the vocabulary belongs to a multilingual model,
            which shifts the special token ids.

    Returns:
        The filter bank and vocabulary.

    Raises:
        BundleFormatError: On a bad magic number, a truncated record or an
            over-long vocabulary entry.
    """
    reader = ByteReader(data)

    magic = reader.read_u32("magic")
    if magic != BUNDLE_MAGIC:
        raise BundleFormatError(
            f"Invalid bundle (bad magic 0x{magic:08x}, expected 0x{BUNDLE_MAGIC:08x})"
        )

    n_mel = reader.read_u32("mel band count")
    n_fft = reader.read_u32("fft bin count")
    weights = reader.read_f32_array(n_mel * n_fft, "filter weights")
    filters = FilterBank(mel_bands=n_mel, fft_bins=n_fft, weights=weights)

    n_vocab = reader.read_i32("vocabulary size")
    if n_vocab < 0:
        raise BundleFormatError(f"Negative vocabulary size {n_vocab}")

    tokens = []
    for token_id in range(n_vocab):
        length = reader.read_u32(f"length of token {token_id}")
        if length > MAX_TOKEN_BYTES:
            raise BundleFormatError(
                f"Token {token_id} is {length} bytes, longer than {MAX_TOKEN_BYTES}"
            )
        tokens.append(reader.read(length, f"token {token_id}"))

    if reader.remaining:
        logger.debug("Ignoring %d trailing bytes after vocabulary", reader.remaining)

    special = SpecialTokens.multilingual() if multilingual else SpecialTokens.english()
    vocab = Vocabulary(tokens=tuple(tokens), special=special)
    logger.debug("Parsed bundle: %dx%d filters, %d tokens", n_mel, n_fft, n_vocab)
    return Bundle(filters, vocab)


def pack_bundle(filters: FilterBank, vocab: Vocabulary) -> bytes:
    """Encode a filter bank and vocabulary into the bundle layout."""
    parts = [
        _U32.pack(BUNDLE_MAGIC),
        _U32.pack(filters.mel_bands),
        _U32.pack(filters.fft_bins),
        filters.weights.astype("<f4").tobytes(),
        _I32.pack(vocab.size),
    ]
    for token_id, token in enumerate(vocab.tokens):
        if len(token) > MAX_TOKEN_BYTES:
            raise BundleFormatError(
                f"Token {token_id} is {len(token)} bytes, longer than {MAX_TOKEN_BYTES}"
            )
        parts.append(_U32.pack(len(token)))
        parts.append(token)
    return b"".join(parts)


def load_bundle(path: str | Path, multilingual: bool = False) -> Bundle:
    """Read and parse a bundle file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise BundleFormatError(f"Cannot read bundle '{path}': {e}") from e
    return parse_bundle(data, multilingual=multilingual)
