"""Greedy conversion of model output token ids to text."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from whisper_tflite.bundle import Vocabulary

_SPACE_RUN = re.compile(b" {2,}")


@dataclass(frozen=True)
class DecodedText:
    text: str
    token_count: int = 0

    def __str__(self) -> str:
        return self.text


def collapse_spaces(data: bytes) -> bytes:
    """Replace every run of two or more ' ' with a single space.

    Only the space character is touched; tabs and newlines are kept.
    """
    return _SPACE_RUN.sub(b" ", data)


def decode(ids: Iterable[int], vocab: Vocabulary) -> DecodedText:
    """Render token ids as text.

    Decoding stops at the first end-of-text id. Other ids at or above it are
    control tokens and are skipped, as are ids outside the vocabulary.

    Args:
        ids: Token ids produced by the inference engine.
        vocab: Vocabulary the ids index into.

    Returns:
        The text with runs of spaces collapsed.
    """
    eot = vocab.end_of_text_id
    pieces: list[bytes] = []
    for token_id in ids:
        token_id = int(token_id)
        if token_id == eot:
            break
        if 0 <= token_id < eot and token_id < vocab.size:
            pieces.append(vocab[token_id])

    text = collapse_spaces(b"".join(pieces)).decode("utf-8", errors="replace")
    return DecodedText(text=text, token_count=len(pieces))
